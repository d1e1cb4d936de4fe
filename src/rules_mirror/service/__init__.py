"""Service boundary consumed by the protocol layer and the CLI."""

from rules_mirror.service.facade import RulesService, build_rules_service
from rules_mirror.service.models import ServiceResult

__all__ = ["RulesService", "ServiceResult", "build_rules_service"]
