"""ClawGuard plugin for gating tool execution behind security checks.

This plugin hooks into the host's before_tool_call event, runs every command
and URL through the risk assessor, and asks a human over Discord when the
assessor only warns.
"""

import importlib
import importlib.metadata
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from .config_loader import (
    ClawGuardConfig,
    ConfigValidationError,
    DiscordConfig,
    load_config,
    validate_config,
)
from .extraction import ActionRequest
from .messaging import HostMessaging, MessagingCapability, create_messaging
from .policy import GatePolicy
from .verdicts import GateVerdict, RiskAssessor

logger = logging.getLogger(__name__)

ASSESSOR_ENTRY_POINT_GROUP = "clawguard.assessors"


class AssessorLoadError(ImportError):
    """Raised when a risk assessor reference cannot be resolved."""


def load_assessor(reference: str) -> RiskAssessor:
    """Resolve a risk assessor from a "module:attr" path or an entry point name.

    The resolved attribute may be a RiskAssessor instance, or a class or
    factory function returning one.
    """
    if ":" in reference:
        module_name, _, attr = reference.partition(":")
        try:
            module = importlib.import_module(module_name)
            target = getattr(module, attr)
        except (ImportError, AttributeError) as e:
            raise AssessorLoadError(f"Cannot load assessor '{reference}': {e}") from e
    else:
        matches = [
            ep for ep in importlib.metadata.entry_points(group=ASSESSOR_ENTRY_POINT_GROUP)
            if ep.name == reference
        ]
        if not matches:
            raise AssessorLoadError(
                f"No assessor named '{reference}' in entry point group '{ASSESSOR_ENTRY_POINT_GROUP}'"
            )
        target = matches[0].load()

    assessor = target if isinstance(target, RiskAssessor) else target()
    if not isinstance(assessor, RiskAssessor):
        raise AssessorLoadError(f"'{reference}' did not produce a RiskAssessor")
    return assessor


class ClawGuardPlugin:
    """Plugin that gates tool calls behind risk checks and human approval.

    Two integration styles are supported:

    1. Hook: the host calls before_tool_call(tool_call, context) and honours
       the returned {"allow": True} / {"block": True, "reason": ...} dict.
    2. Middleware: wrap_executor()/wrap_all_executors() run the gate before
       the wrapped executor and return an error dict when blocked.

    The gate never raises to the host: every internal failure blocks.
    """

    metadata = {
        "name": "clawguard-security",
        "version": "1.2.0",
        "description": "Automatic security checks for all tool calls",
        "hooks": ["before_tool_call"],
    }

    def __init__(self):
        self._config: Optional[ClawGuardConfig] = None
        self._policy: Optional[GatePolicy] = None
        self._messaging: Optional[MessagingCapability] = None
        self._initialized = False
        self._decision_log: List[Dict[str, Any]] = []

    @property
    def name(self) -> str:
        return "clawguard"

    def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the plugin.

        Args:
            config: Optional configuration dict. Options:
                   - assessor: RiskAssessor instance or "module:attr" reference (required)
                   - config_path: Path to clawguard.json
                   - discord: Inline "discord" section (overrides file)
                   - messaging: MessagingCapability instance, or a kind for
                     create_messaging() ("discord" uses the configured bot token).
                     "auto" picks Discord when approval and a bot token are
                     configured, and otherwise falls back to the host context.

        Raises:
            ValueError: If no assessor is given
            AssessorLoadError: If the assessor reference cannot be resolved
            FileNotFoundError: If config_path or CLAWGUARD_CONFIG_PATH names
                a missing file
            ConfigValidationError: If the file or inline discord section is invalid
        """
        config = config or {}

        assessor = config.get("assessor")
        if assessor is None:
            raise ValueError("ClawGuardPlugin requires an 'assessor'")
        if isinstance(assessor, str):
            assessor = load_assessor(assessor)

        # Defaults apply only when the standard search finds no file; a named
        # file that is missing raises.
        self._config = load_config(config.get("config_path"))

        if "discord" in config:
            is_valid, errors = validate_config({"discord": config["discord"]})
            if not is_valid:
                raise ConfigValidationError(errors)
            self._config.discord = DiscordConfig.from_dict(config["discord"])

        self._messaging = self._create_messaging(config.get("messaging"))
        self._policy = GatePolicy(assessor, self._config.discord)
        self._initialized = True

        logger.info("ClawGuard security plugin loaded")
        if self._config.discord.approval_configured:
            logger.info("   Discord approval enabled (channel: %s)", self._config.discord.channel_id)
        else:
            logger.info("   Discord approval disabled (warnings will be logged but allowed)")

    def _create_messaging(
        self, messaging: Union[MessagingCapability, str, None]
    ) -> Optional[MessagingCapability]:
        if messaging is None or isinstance(messaging, MessagingCapability):
            return messaging

        discord = self._config.discord
        if messaging == "auto":
            if not (discord.approval_configured and discord.bot_token):
                return None
            messaging = "discord"
        return create_messaging(messaging, {"bot_token": discord.bot_token})

    def shutdown(self) -> None:
        """Shutdown the plugin."""
        self._policy = None
        self._messaging = None
        self._initialized = False

    def before_tool_call(self, tool_call: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
        """Host hook run before every tool call.

        Args:
            tool_call: {"tool": name, "parameters": {...}}
            context: Host context; its message tool is used for approval when
                     no messaging capability was configured

        Returns:
            {"allow": True} or {"block": True, "reason": ...}
        """
        return self.evaluate(tool_call, context).to_dict()

    def evaluate(self, tool_call: Dict[str, Any], context: Any = None) -> GateVerdict:
        """Run the gate for a tool call and record the decision."""
        action = ActionRequest.from_tool_call(tool_call)

        if not self._policy:
            verdict = GateVerdict.block("ClawGuard not initialized")
        else:
            messaging = self._messaging or HostMessaging.from_context(context)
            try:
                verdict = self._policy.evaluate(action, messaging)
            except Exception as e:
                logger.exception("ClawGuard security check failed for tool %s", action.tool)
                verdict = GateVerdict.block(f"Security check failed: {e}")

        self._log_decision(action, verdict)
        return verdict

    def _log_decision(self, action: ActionRequest, verdict: GateVerdict) -> None:
        """Record a gate decision."""
        self._decision_log.append({
            "tool": action.tool,
            "parameters": action.parameters,
            "decision": "allow" if verdict.allowed else "block",
            "reason": verdict.reason,
        })

    def get_decision_log(self) -> List[Dict[str, Any]]:
        """Get the log of gate decisions."""
        return self._decision_log.copy()

    def clear_decision_log(self) -> None:
        """Clear the decision log."""
        self._decision_log.clear()

    def wrap_executor(
        self,
        name: str,
        executor: Callable[[Dict[str, Any]], Any],
        context: Any = None
    ) -> Callable[[Dict[str, Any]], Any]:
        """Wrap an executor with the gate.

        Args:
            name: Tool name
            executor: Original executor function
            context: Host context forwarded to the gate

        Returns:
            Wrapped executor that runs the gate before executing
        """
        def wrapped(args: Dict[str, Any]) -> Any:
            verdict = self.evaluate({"tool": name, "parameters": args}, context)
            if not verdict.allowed:
                return {"error": f"Blocked by ClawGuard: {verdict.reason}", "_clawguard": verdict.to_dict()}
            return executor(args)

        return wrapped

    def wrap_all_executors(
        self,
        executors: Dict[str, Callable[[Dict[str, Any]], Any]],
        context: Any = None
    ) -> Dict[str, Callable[[Dict[str, Any]], Any]]:
        """Wrap all executors in a dict with the gate."""
        return {
            name: self.wrap_executor(name, executor, context)
            for name, executor in executors.items()
        }


def create_plugin() -> ClawGuardPlugin:
    """Factory function to create the ClawGuard plugin instance."""
    return ClawGuardPlugin()
