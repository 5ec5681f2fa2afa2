# numberexplorer/__init__.py
from .ChineseNumerals import chinese_label
from .ListeningSession import ListeningSession
from .NumeralInterpreter import NumeralInterpreter
from .RecoveryPolicy import RecoveryPolicy
from .TargetSequence import TargetSequence

__all__ = [
    'chinese_label',
    'ListeningSession',
    'NumeralInterpreter',
    'RecoveryPolicy',
    'TargetSequence'
]
