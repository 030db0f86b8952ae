from typing import Iterable, Optional

from .rules.base import BaseRule


class RuleRegistry:
    """Registry for managing and loading linting rules"""

    def __init__(self):
        self._rules: list[BaseRule] = []
        self._load_builtin_rules()

    def register(self, rule: BaseRule):
        if any(r.rule_id == rule.rule_id for r in self._rules):
            raise ValueError(f"Rule {rule.rule_id} is already registered")
        self._rules.append(rule)

    def get_all_rules(self) -> list[BaseRule]:
        return list(self._rules)

    def get_rule(self, rule_id: str) -> Optional[BaseRule]:
        for rule in self._rules:
            if rule.rule_id == rule_id or rule.name == rule_id:
                return rule
        return None

    def get_enabled_rules(
        self, select: Optional[Iterable[str]] = None, ignore: Optional[Iterable[str]] = None
    ) -> list[BaseRule]:
        """Rules matching any ``select`` entry and no ``ignore`` entry.

        Entries are a full rule id, a rule name or a department prefix such
        as ``Performance``. ``select=None`` selects everything.
        """
        select = list(select) if select is not None else None
        ignore = list(ignore or [])
        enabled = []
        for rule in self._rules:
            if select is not None and not any(_selects(entry, rule) for entry in select):
                continue
            if any(_selects(entry, rule) for entry in ignore):
                continue
            enabled.append(rule)
        return enabled

    def _load_builtin_rules(self):
        from .rules.performance import UseZipToWrapArrayContents

        self.register(UseZipToWrapArrayContents())


def _selects(entry: str, rule: BaseRule) -> bool:
    return entry in (rule.rule_id, rule.name, rule.department)


registry = RuleRegistry()
