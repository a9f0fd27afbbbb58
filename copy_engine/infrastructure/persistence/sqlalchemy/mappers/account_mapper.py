"""Read-side mappers - fills, subscriptions, guardrails, connections."""

from copy_engine.domain.brokerage.value_objects import BrokerConnection, ConnectionStatus
from copy_engine.domain.copying.value_objects import (
    FollowerSubscription,
    Guardrail,
    TradeFill,
    TradeSide,
)
from copy_engine.infrastructure.persistence.sqlalchemy.models import (
    BrokerConnectionModel,
    CopyGuardrailModel,
    CopySubscriptionModel,
    TradeModel,
)

from .copy_order_mapper import as_utc


class TradeFillMapper:
    def to_value(self, model: TradeModel) -> TradeFill:
        return TradeFill(
            id=model.id,
            user_id=model.user_id,
            symbol=model.symbol,
            side=TradeSide(model.side.upper()),
            quantity=model.quantity,
            price=model.price,
            filled_at=as_utc(model.filled_at),
            broker_connection_id=model.broker_connection_id,
            account_number=model.account_number,
        )


class SubscriptionMapper:
    def to_value(self, model: CopySubscriptionModel) -> FollowerSubscription:
        return FollowerSubscription(
            leader_id=model.leader_id,
            follower_id=model.follower_id,
            auto_copy_enabled=model.auto_copy_enabled,
            paused=model.paused,
            deferred_mode=model.deferred_mode,
        )


class GuardrailMapper:
    def to_value(self, model: CopyGuardrailModel) -> Guardrail:
        return Guardrail(
            follower_id=model.follower_id,
            max_allocation_pct=model.max_allocation_pct,
            symbol=model.symbol,
        )

    def to_model(self, guardrail: Guardrail) -> CopyGuardrailModel:
        return CopyGuardrailModel(
            follower_id=guardrail.follower_id,
            symbol=guardrail.symbol,
            max_allocation_pct=guardrail.max_allocation_pct,
        )


class BrokerConnectionMapper:
    def to_value(self, model: BrokerConnectionModel) -> BrokerConnection:
        return BrokerConnection(
            id=model.id,
            user_id=model.user_id,
            authorization_id=model.authorization_id,
            status=ConnectionStatus(model.status),
            brokerage_name=model.brokerage_name,
        )
