from __future__ import annotations


class SplitError(ValueError):
    pass


class ImportFormatError(SplitError):
    pass


class TransitionBlocked(SplitError):
    pass


class SettlementRefused(TransitionBlocked):
    pass
