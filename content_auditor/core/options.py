"""Validation option registry.

Options are short keys that switch individual checks on or off. The
validators only ever ask ``is_enabled(key)``; this registry is where the
command line stores the answers.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Tuple

from content_auditor.exceptions import OptionError

# Signature every validator accepts for option lookups
OptionPredicate = Callable[[str], bool]

# key -> (default, description)
KNOWN_OPTIONS: Dict[str, Tuple[bool, str]] = {
    "pmd": (True, "Report items whose manifest omits a dependency"),
    "trd": (True, "Check that tutorials referenced by items exist"),
    "umf": (False, "Report unreferenced wordlist attachment files"),
    "gtr": (False, "Include gloss text in the glossary report"),
    "uwt": (False, "Report wordlist terms not referenced by any item"),
    "mwa": (False, "Report missing attachments of unreferenced wordlist terms"),
}

ALL_KEY = "all"


class ValidationOptions:
    """Named on/off switches for optional checks.

    Keys that were never registered report as enabled so that checks
    added without a toggle always run.
    """

    def __init__(self) -> None:
        self._values: Dict[str, bool] = {k: v[0] for k, v in KNOWN_OPTIONS.items()}

    def is_enabled(self, key: str) -> bool:
        return self._values.get(key, True)

    def __call__(self, key: str) -> bool:
        return self.is_enabled(key)

    def set(self, key: str, value: bool) -> None:
        """Set one option.

        Raises:
            OptionError: If the key is unknown, or ``all`` is being disabled
        """
        if key == ALL_KEY:
            if not value:
                raise OptionError("Disabling all validation options is not supported", {"option": key})
            self.enable_all()
            return
        if key not in KNOWN_OPTIONS:
            raise OptionError("Unknown validation option", {"option": key})
        self._values[key] = value

    def enable_all(self) -> None:
        for key in self._values:
            self._values[key] = True

    def parse_flag(self, flag: str) -> None:
        """Apply a ``+key`` / ``-key`` flag.

        Raises:
            OptionError: If the flag has no sign or names an unknown key
        """
        if len(flag) < 2 or flag[0] not in "+-":
            raise OptionError("Option flag must start with '+' or '-'", {"flag": flag})
        self.set(flag[1:].lower(), flag[0] == "+")

    def apply(self, flags: Iterable[str]) -> "ValidationOptions":
        for flag in flags:
            self.parse_flag(flag)
        return self

    def enabled_keys(self) -> List[str]:
        return sorted(k for k, v in self._values.items() if v)

    @staticmethod
    def describe() -> str:
        """Help text listing every option and its default."""
        lines = []
        for key, (default, text) in KNOWN_OPTIONS.items():
            lines.append(f"  {key}  {'on ' if default else 'off'}  {text}")
        return "\n".join(lines)
