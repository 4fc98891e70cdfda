"""Anthropic-backed report generation and command parsing."""

import logging
from typing import Any

import anthropic

from .assistant import AssistantError

logger = logging.getLogger(__name__)

UPDATE_TOOL_NAME = "update_inventory_item"

_REPORT_SYSTEM = (
    "You write inventory reports in clear, well-formatted markdown. "
    "Base every statement on the inventory data you are given."
)

_COMMAND_SYSTEM = (
    "You are an assistant for an inventory management system. A user has given a "
    "command to update an inventory item. Work out which fields to change and call "
    f"the '{UPDATE_TOOL_NAME}' tool with only the fields the user explicitly "
    "mentioned. Do not make up values or fields. If the command is unclear or is not "
    "about updating an item, do not call the tool."
)


class AnthropicAssistant:
    """Implements ReportGenerator and CommandParser on the Messages API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-5",
        max_tokens: int = 4096,
        max_retries: int = 3,
        timeout_seconds: float = 120.0,
        client: Any = None,
    ):
        if client is None:
            try:
                client = anthropic.Anthropic(
                    api_key=api_key,
                    max_retries=max_retries,
                    timeout=timeout_seconds,
                )
            except anthropic.AnthropicError as e:
                raise AssistantError(f"Cannot create Anthropic client: {e}") from e
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    def _create(self, **kwargs: Any) -> Any:
        try:
            return self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                **kwargs,
            )
        except anthropic.APIError as e:
            logger.error("Anthropic request failed: %s", e)
            raise AssistantError(f"Assistant request failed: {e}") from e

    def generate_report(self, instruction: str, data_snapshot: str) -> str:
        """Ask the model for a markdown report over the data snapshot."""
        response = self._create(
            system=_REPORT_SYSTEM,
            messages=[
                {
                    "role": "user",
                    "content": f"{instruction}\nInventory data:\n{data_snapshot}",
                }
            ],
        )
        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        logger.info("Report generated (%d chars)", len(text))
        return text

    def parse_command(self, text: str, target_schema: dict[str, Any]) -> dict[str, Any]:
        """Ask the model to express a command as tool input matching the schema.

        Returns:
            The tool input, or an empty dict when the model declined to call
            the tool
        """
        response = self._create(
            system=_COMMAND_SYSTEM,
            temperature=0,
            tools=[
                {
                    "name": UPDATE_TOOL_NAME,
                    "description": (
                        "Updates the fields of an inventory item. Only specify the "
                        "fields the user explicitly asked to change."
                    ),
                    "input_schema": target_schema,
                }
            ],
            messages=[{"role": "user", "content": f"Command: {text}"}],
        )
        for block in response.content:
            if getattr(block, "type", None) == "tool_use" and block.name == UPDATE_TOOL_NAME:
                return dict(block.input)

        logger.info("Model did not produce an update for command %r", text)
        return {}
