from pymongo import ASCENDING, DESCENDING
from pymongo.errors import OperationFailure


def _normalize_key_pairs(keys):
    return [(k, v) for k, v in keys]


async def _create_index_safe(collection, keys, **kwargs):
    """
    Create index safely.
    On IndexOptionsConflict/IndexKeySpecsConflict for the same key pattern,
    drop the differently-named index and recreate with the desired options.
    """
    desired_key = _normalize_key_pairs(keys)
    desired_name = kwargs.get("name")
    try:
        await collection.create_index(keys, **kwargs)
        return
    except OperationFailure as e:
        if getattr(e, "code", None) not in {85, 86}:
            raise

    async for idx in collection.list_indexes():
        idx_key = _normalize_key_pairs(list(idx.get("key", {}).items()))
        idx_name = idx.get("name")
        if idx_key == desired_key and idx_name and idx_name != desired_name:
            await collection.drop_index(idx_name)

    await collection.create_index(keys, **kwargs)


async def ensure_indexes(db):
    # Orders: open-order scan and per-seller lookback
    await _create_index_safe(
        db.orders,
        [("state", ASCENDING), ("created_at", ASCENDING)],
        name="orders_state_created_at_idx",
    )
    await _create_index_safe(
        db.orders,
        [("seller_uid", ASCENDING), ("created_at", DESCENDING)],
        name="orders_seller_created_at_idx",
    )

    # Sellers by tier
    await _create_index_safe(
        db.users,
        [("seller_tier", ASCENDING)],
        name="users_seller_tier_idx",
        sparse=True,
    )

    # Audit retention
    await _create_index_safe(
        db.audit_logs,
        [("created_at", ASCENDING)],
        name="audit_logs_created_at_idx",
    )
