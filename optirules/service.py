"""Optimization routing for the proxy request path.

Fetches the rules that apply to a request, runs the matcher, and falls back
to the requested (or configured default) model when nothing matches.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from optirules.config import OptiRulesConfig
from optirules.context import build_request_context
from optirules.db.repository import OptimizationRuleRepository
from optirules.exceptions import ConfigurationError, RuleDefinitionError
from optirules.matcher import match_rules
from optirules.types import OptimizationRule, RequestContext, SupportedProvider
from optirules.utils.token_counter import TokenCounter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoutingDecision:
    """Outcome of optimization routing for one request."""

    model: Optional[str]  # None when nothing matched and no fallback is known
    matched: bool
    context: Optional[RequestContext] = None


class OptimizationRouter:
    """Routes requests according to stored optimization rules."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        config: Optional[OptiRulesConfig] = None,
        counter: Optional[TokenCounter] = None,
    ):
        self.session_factory = session_factory
        self.config = config or OptiRulesConfig()
        self.counter = counter

    async def _fetch_rules(
        self,
        session: AsyncSession,
        org_id: UUID,
        provider: SupportedProvider,
    ) -> list[OptimizationRule]:
        repo = OptimizationRuleRepository(session)
        if self.config.routing.include_team_rules:
            rules = await repo.find_by_organization_id(org_id)
            return [rule for rule in rules if rule.provider == provider]
        return await repo.find_enabled_by_organization_and_provider(org_id, provider)

    async def resolve(
        self,
        org_id: UUID,
        provider: SupportedProvider,
        messages: list[dict[str, Any]],
        tools: Optional[list[dict[str, Any]]] = None,
        model: Optional[str] = None,
    ) -> RoutingDecision:
        """Decide which model a chat request goes to.

        Args:
            org_id: Organization the request is made under
            provider: Upstream provider handling the request
            messages: Chat messages of the request
            tools: Tool definitions attached to the request
            model: Model the client asked for

        Returns:
            The matched target model, or the fallback with ``matched=False``

        Raises:
            RuleDefinitionError: If a stored rule cannot be interpreted
            ConfigurationError: If the provider is not supported
        """
        fallback = model or self.config.routing.default_model

        if not self.config.routing.enabled:
            return RoutingDecision(model=fallback, matched=False)

        try:
            provider = SupportedProvider(provider)
        except ValueError:
            raise ConfigurationError(f"Unsupported provider: {provider}", param="provider") from None

        context = build_request_context(
            messages,
            tools=tools,
            model=model or "gpt-4",
            counter=self.counter,
        )

        try:
            async with self.session_factory() as session:
                rules = await self._fetch_rules(session, org_id, provider)
            target = match_rules(rules, context)
        except RuleDefinitionError as e:
            logger.error(
                "Invalid optimization rule for org %s (provider=%s): %s",
                org_id,
                provider.value,
                e,
            )
            raise

        if target is None:
            return RoutingDecision(model=fallback, matched=False, context=context)

        logger.info(
            "Routing org %s request from %s to %s by optimization rule",
            org_id,
            model,
            target,
        )
        return RoutingDecision(model=target, matched=True, context=context)
