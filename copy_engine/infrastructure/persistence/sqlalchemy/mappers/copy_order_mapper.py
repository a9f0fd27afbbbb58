"""Copy order mappers - CopyOrder / DelayedCopyOrder ↔ ORM models."""

from datetime import datetime, timezone

from copy_engine.domain.copying.entities import CopyOrder, DelayedCopyOrder
from copy_engine.domain.copying.value_objects import (
    CopyOrderStatus,
    DelayedCopyStatus,
    TradeSide,
)
from copy_engine.infrastructure.persistence.sqlalchemy.models import (
    CopyOrderModel,
    DelayedCopyOrderModel,
)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite returns naive datetimes; everything stored is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class CopyOrderMapper:
    """Mapper for CopyOrder entity ↔ CopyOrderModel ORM.

    Example:
        >>> mapper = CopyOrderMapper()
        >>> model = mapper.to_model(order)  # Domain → ORM
        >>> order_back = mapper.to_entity(model)  # ORM → Domain
    """

    def to_entity(self, model: CopyOrderModel) -> CopyOrder:
        order = CopyOrder(
            id=model.id,
            leader_trade_id=model.leader_trade_id,
            follower_id=model.follower_id,
            leader_id=model.leader_id,
            symbol=model.symbol,
            side=TradeSide(model.side),
            quantity=model.quantity,
            status=CopyOrderStatus(model.status),
            broker_order_id=model.broker_order_id,
            filled_at=as_utc(model.filled_at),
            error_message=model.error_message,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
        # Loaded state, not new facts: no events to replay
        order.clear_domain_events()
        return order

    def to_model(self, entity: CopyOrder) -> CopyOrderModel:
        return CopyOrderModel(
            id=entity.id,
            leader_trade_id=entity.leader_trade_id,
            follower_id=entity.follower_id,
            leader_id=entity.leader_id,
            symbol=entity.symbol,
            side=entity.side.value,
            quantity=entity.quantity,
            status=entity.status.value,
            broker_order_id=entity.broker_order_id,
            filled_at=entity.filled_at,
            error_message=entity.error_message,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def update_model_from_entity(
        self, model: CopyOrderModel, entity: CopyOrder
    ) -> CopyOrderModel:
        """Copy the mutable lifecycle fields onto an existing row."""
        model.status = entity.status.value
        model.broker_order_id = entity.broker_order_id
        model.filled_at = entity.filled_at
        model.error_message = entity.error_message
        model.updated_at = entity.updated_at
        return model


class DelayedCopyOrderMapper:
    """Mapper for DelayedCopyOrder entity ↔ DelayedCopyOrderModel ORM."""

    def to_entity(self, model: DelayedCopyOrderModel) -> DelayedCopyOrder:
        order = DelayedCopyOrder(
            id=model.id,
            original_trade_id=model.original_trade_id,
            follower_id=model.follower_id,
            leader_id=model.leader_id,
            account_number=model.account_number,
            symbol=model.symbol,
            side=TradeSide(model.side),
            quantity=model.quantity,
            scheduled_for=as_utc(model.scheduled_for),
            status=DelayedCopyStatus(model.status),
            copy_order_id=model.copy_order_id,
            executed_at=as_utc(model.executed_at),
            error_message=model.error_message,
            created_at=as_utc(model.created_at),
        )
        order.clear_domain_events()
        return order

    def to_model(self, entity: DelayedCopyOrder) -> DelayedCopyOrderModel:
        return DelayedCopyOrderModel(
            id=entity.id,
            original_trade_id=entity.original_trade_id,
            follower_id=entity.follower_id,
            leader_id=entity.leader_id,
            account_number=entity.account_number,
            symbol=entity.symbol,
            side=entity.side.value,
            quantity=entity.quantity,
            status=entity.status.value,
            scheduled_for=entity.scheduled_for,
            copy_order_id=entity.copy_order_id,
            executed_at=entity.executed_at,
            error_message=entity.error_message,
            created_at=entity.created_at,
        )

    def update_model_from_entity(
        self, model: DelayedCopyOrderModel, entity: DelayedCopyOrder
    ) -> DelayedCopyOrderModel:
        model.status = entity.status.value
        model.copy_order_id = entity.copy_order_id
        model.executed_at = entity.executed_at
        model.error_message = entity.error_message
        return model
