"""
Command Vocabulary

Tagged command variants the decision provider may choose from and the
device driver executes. Each command class carries a stable ``kind`` name
that is used when describing the allowed vocabulary to a decision provider.

GoalAchieved is the distinguished marker: a step whose command is
GoalAchieved means the current goal has been reached and nothing is sent
to the device.

LaunchApp and ClearState are device-only commands used by initializers;
they are never part of an agent vocabulary.
"""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Command:
    """Base class for every command variant."""

    kind: ClassVar[str] = "command"

    def describe(self) -> str:
        """Return a short human-readable form, e.g. ``ClickWithText(OK)``."""
        values = [str(v) for v in self.__dict__.values()]
        if not values:
            return self.kind
        return f"{self.kind}({', '.join(values)})"


@dataclass(frozen=True)
class ClickWithId(Command):
    kind: ClassVar[str] = "ClickWithId"
    id: str


@dataclass(frozen=True)
class ClickWithText(Command):
    kind: ClassVar[str] = "ClickWithText"
    text: str


@dataclass(frozen=True)
class InputText(Command):
    kind: ClassVar[str] = "InputText"
    text: str


@dataclass(frozen=True)
class BackPress(Command):
    kind: ClassVar[str] = "BackPress"


@dataclass(frozen=True)
class KeyPress(Command):
    kind: ClassVar[str] = "KeyPress"
    key_name: str


@dataclass(frozen=True)
class Scroll(Command):
    kind: ClassVar[str] = "Scroll"


@dataclass(frozen=True)
class DpadUp(Command):
    kind: ClassVar[str] = "DpadUp"


@dataclass(frozen=True)
class DpadDown(Command):
    kind: ClassVar[str] = "DpadDown"


@dataclass(frozen=True)
class DpadLeft(Command):
    kind: ClassVar[str] = "DpadLeft"


@dataclass(frozen=True)
class DpadRight(Command):
    kind: ClassVar[str] = "DpadRight"


@dataclass(frozen=True)
class DpadCenter(Command):
    kind: ClassVar[str] = "DpadCenter"


@dataclass(frozen=True)
class GoalAchieved(Command):
    kind: ClassVar[str] = "GoalAchieved"


@dataclass(frozen=True)
class LaunchApp(Command):
    kind: ClassVar[str] = "LaunchApp"
    app_id: str


@dataclass(frozen=True)
class ClearState(Command):
    kind: ClassVar[str] = "ClearState"
    app_id: str


CommandType = type[Command]


def default_command_types() -> list[CommandType]:
    """Vocabulary for pointer-based (mobile) devices."""
    return [
        ClickWithId,
        ClickWithText,
        InputText,
        BackPress,
        KeyPress,
        Scroll,
        GoalAchieved,
    ]


def default_command_types_for_tv() -> list[CommandType]:
    """Vocabulary for directional-pad (TV) devices."""
    return [
        DpadUp,
        DpadDown,
        DpadLeft,
        DpadRight,
        DpadCenter,
        InputText,
        BackPress,
        KeyPress,
        GoalAchieved,
    ]
