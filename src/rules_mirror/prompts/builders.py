from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from rules_mirror.service.facade import RulesService

logger = logging.getLogger(__name__)


class PromptError(Exception):
    """Raised when a prompt cannot be assembled (unknown prompt, missing argument or rule)."""


@dataclass(frozen=True, slots=True)
class PromptArgument:
    name: str
    description: str
    required: bool = True


@dataclass(frozen=True, slots=True)
class PromptDefinition:
    name: str
    description: str
    arguments: tuple[PromptArgument, ...]


@dataclass(frozen=True, slots=True)
class BuiltPrompt:
    description: str
    text: str


PROMPTS: tuple[PromptDefinition, ...] = (
    PromptDefinition(
        name="apply_documentation_consistency",
        description="Apply documentation consistency rules when creating or updating documentation",
        arguments=(
            PromptArgument("context", "Context about what documentation is being created or updated"),
        ),
    ),
    PromptDefinition(
        name="validate_completeness",
        description="Validate documentation completeness using the validation framework",
        arguments=(
            PromptArgument("phase", "Phase name or identifier to validate"),
            PromptArgument(
                "document_type",
                "Type of document being validated (e.g., 'phase_overview', 'technical_solution')",
                required=False,
            ),
        ),
    ),
    PromptDefinition(
        name="check_objective_alignment",
        description="Check if work aligns with stated objectives using the objective alignment framework",
        arguments=(
            PromptArgument("work_description", "Description of the work being done"),
            PromptArgument("objectives", "Stated objectives for this work"),
        ),
    ),
    PromptDefinition(
        name="plan_phase",
        description="Get guidance for planning a new roadmap phase",
        arguments=(
            PromptArgument("phase_name", "Name of the phase being planned"),
            PromptArgument("context", "Context about the phase (what it's trying to accomplish)", required=False),
        ),
    ),
    PromptDefinition(
        name="review_jira_initiative",
        description="Review a JIRA Initiative against organizational standards",
        arguments=(PromptArgument("initiative_details", "Details of the Initiative to review"),),
    ),
    PromptDefinition(
        name="review_jira_epic",
        description="Review a JIRA Epic against organizational standards",
        arguments=(PromptArgument("epic_details", "Details of the Epic to review"),),
    ),
)

_PROMPTS_BY_NAME = {prompt.name: prompt for prompt in PROMPTS}


def _require(definition: PromptDefinition, arguments: Mapping[str, str]) -> dict[str, str]:
    values = {key: str(value) for key, value in arguments.items() if value is not None}
    missing = [arg.name for arg in definition.arguments if arg.required and not values.get(arg.name, "").strip()]
    if missing:
        raise PromptError(f"Missing required argument(s) for {definition.name}: {', '.join(missing)}")
    return values


class PromptBuilder:
    """Assembles prompt text around rule content fetched through the service."""

    def __init__(self, service: RulesService) -> None:
        self._service = service

    @staticmethod
    def definitions() -> Sequence[PromptDefinition]:
        return PROMPTS

    async def build(self, name: str, arguments: Optional[Mapping[str, str]] = None) -> BuiltPrompt:
        definition = _PROMPTS_BY_NAME.get(name)
        if definition is None:
            raise PromptError(f"Unknown prompt: {name}")
        values = _require(definition, arguments or {})
        text = await getattr(self, f"_build_{name}")(values)
        return BuiltPrompt(description=definition.description, text=text)

    async def _rule_text(self, rule_name: str) -> str:
        result = await self._service.get_rule(rule_name)
        if result.is_error:
            raise PromptError(result.text)
        return result.text

    async def _build_apply_documentation_consistency(self, values: dict[str, str]) -> str:
        rule = await self._rule_text("documentation-consistency")
        return (
            f"Apply these documentation consistency rules:\n\n{rule}\n\n---\n\n"
            f"Context: {values['context']}\n\n"
            "Please apply these rules to ensure consistency across all related documentation."
        )

    async def _build_validate_completeness(self, values: dict[str, str]) -> str:
        rule = await self._rule_text("completeness-validation")
        document_type = values.get("document_type", "").strip()
        doc_type_part = f"\n\nDocument type: {document_type}" if document_type else ""
        return (
            f"Validate completeness using these rules:\n\n{rule}\n\n---\n\n"
            f"Phase: {values['phase']}{doc_type_part}\n\n"
            "Please validate that all required artifacts and documentation are complete."
        )

    async def _build_check_objective_alignment(self, values: dict[str, str]) -> str:
        rule = await self._rule_text("objective-alignment")
        return (
            f"Check objective alignment using these rules:\n\n{rule}\n\n---\n\n"
            f"Work Description: {values['work_description']}\n\n"
            f"Objectives: {values['objectives']}\n\n"
            "Please verify that the work aligns with the stated objectives and follows the alignment framework."
        )

    async def _build_plan_phase(self, values: dict[str, str]) -> str:
        phase_name = values["phase_name"]
        context = values.get("context", "").strip()
        try:
            planning = await self._rule_text("roadmap-planning-guide")
            objective = await self._rule_text("objective-alignment")
        except PromptError as e:
            logger.info("Planning rules unavailable, using plain planning prompt. error=%s", e)
            return (
                f"Plan a new roadmap phase:\n\nPhase Name: {phase_name}\n\n"
                f"Context: {context or 'No context provided'}\n\n"
                "Please help plan this phase."
            )

        context_part = f"\n\nContext: {context}" if context else ""
        return (
            "Plan a new roadmap phase using these guidelines:\n\n"
            f"## Planning Guide\n{planning}\n\n## Objective Alignment\n{objective}\n\n---\n\n"
            f"Phase Name: {phase_name}{context_part}\n\n"
            "Please help plan this phase following the planning guide and objective alignment framework."
        )

    async def _build_review_jira_initiative(self, values: dict[str, str]) -> str:
        rule = await self._rule_text("jira-initiative-epic-standards")
        return (
            f"Review this JIRA Initiative against organizational standards:\n\n{rule}\n\n---\n\n"
            f"Initiative Details:\n{values['initiative_details']}\n\n"
            "Please review this Initiative and provide feedback based on the organizational standards."
        )

    async def _build_review_jira_epic(self, values: dict[str, str]) -> str:
        rule = await self._rule_text("jira-initiative-epic-standards")
        return (
            f"Review this JIRA Epic against organizational standards:\n\n{rule}\n\n---\n\n"
            f"Epic Details:\n{values['epic_details']}\n\n"
            "Please review this Epic and provide feedback based on the organizational standards."
        )
