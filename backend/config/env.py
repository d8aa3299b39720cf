import os
from dotenv import load_dotenv

load_dotenv()

# =====================================================
# ENV
# =====================================================
ENV = os.getenv("ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# =====================================================
# DATABASE
# =====================================================
MONGO_URI = os.getenv("MONGO_URI") or os.getenv("MONGODB_URI")

# =====================================================
# SECRETS
# =====================================================
ADMIN_API_KEY = os.getenv("ADMIN_API_KEY")

# =====================================================
# SCHEDULING
# =====================================================
ENFORCEMENT_INTERVAL_HOURS = float(os.getenv("ENFORCEMENT_INTERVAL_HOURS", 24))
AUDIT_RETENTION_DAYS = int(os.getenv("AUDIT_RETENTION_DAYS", 90))
WORKERS_ENABLED = os.getenv("WORKERS_ENABLED", "true").lower() in ("1", "true", "yes")

# =====================================================
# CORS
# =====================================================
CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")


def validate_production_env() -> None:
    if (ENV or "").lower() != "production":
        return

    required = {
        "ADMIN_API_KEY": ADMIN_API_KEY,
        "MONGODB_URI": MONGO_URI,
    }

    invalid = []
    for key, value in required.items():
        val = (value or "").strip()
        if not val or val.startswith("CHANGE_THIS"):
            invalid.append(key)

    if invalid:
        raise RuntimeError(f"Production env misconfigured. Invalid keys: {', '.join(sorted(invalid))}")
