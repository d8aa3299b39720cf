from datetime import datetime, timedelta


async def log_audit(
    db,
    actor_id: str,
    actor_role: str,
    action: str,
    metadata: dict | None = None
):
    await db.audit_logs.insert_one({
        "actor_id": actor_id,
        "actor_role": actor_role,
        "action": action,
        "metadata": metadata or {},
        "created_at": datetime.utcnow()
    })


async def prune_audit_logs(db, retention_days: int) -> int:
    cutoff = datetime.utcnow() - timedelta(days=retention_days)

    result = await db.audit_logs.delete_many({
        "created_at": {"$lt": cutoff}
    })
    return result.deleted_count
