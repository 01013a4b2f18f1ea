import os
from dotenv import load_dotenv

# Load Environment Variables from project root .env
env_path = os.path.join(os.path.dirname(__file__), "../.env")
load_dotenv(env_path)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # ═══════════════════════════════════════════════════════════════════
    # TXLANDER CONFIGURATION (Env-Based)
    # ═══════════════════════════════════════════════════════════════════

    # --- Console ---
    SILENT_MODE = _env_bool("SILENT_MODE", False)

    # Paths
    LOG_DIR = os.getenv(
        "LOG_DIR",
        os.path.abspath(os.path.join(os.path.dirname(__file__), "../logs")),
    )

    # --- RPC ---
    RPC_URL = os.getenv("RPC_URL", "https://api.mainnet-beta.solana.com")
    RPC_REQUEST_TIMEOUT_S = float(os.getenv("RPC_REQUEST_TIMEOUT_S", "10"))

    # ═══════════════════════════════════════════════════════════════════
    # SUBMISSION PROTOCOL
    # ═══════════════════════════════════════════════════════════════════

    # Confirmation
    CONFIRM_TIMEOUT_MS = int(os.getenv("CONFIRM_TIMEOUT_MS", "30000"))
    CONFIRM_LEVEL = os.getenv("CONFIRM_LEVEL", "confirmed")  # processed | confirmed | finalized
    STATUS_POLL_INTERVAL_MS = int(os.getenv("STATUS_POLL_INTERVAL_MS", "400"))

    # Rebroadcast (nodes drop single-shot sends at the gossip layer)
    REBROADCAST_INTERVAL_MS = int(os.getenv("REBROADCAST_INTERVAL_MS", "300"))

    # Failure diagnosis (dry-run)
    DIAGNOSIS_TIMEOUT_S = float(os.getenv("DIAGNOSIS_TIMEOUT_S", "10"))
    SIMULATION_LEVEL = os.getenv("SIMULATION_LEVEL", "processed")
