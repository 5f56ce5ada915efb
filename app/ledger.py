"""
⛓️ Ledger Connection Setup - Cliente del ledger de Aptos

Igual que Database: un cliente compartido que se abre y cierra en el lifespan
"""

import logging
from typing import Optional

from app.core.config import get_settings
from app.services.ledger_client import AptosLedgerClient, DisabledLedgerClient, LedgerClient

logger = logging.getLogger(__name__)


class Ledger:
    """Singleton para el cliente del ledger"""

    client: Optional[LedgerClient] = None

    @classmethod
    async def connect(cls):
        """Crea el cliente según la configuración"""
        if cls.client is not None:
            return

        settings = get_settings()

        if not settings.ledger_api_url:
            # Sin ledger: todas las puntuaciones van al almacén local
            cls.client = DisabledLedgerClient()
            logger.warning("⚠️ LEDGER_API_URL not set - running in degraded (local store only) mode")
            return

        cls.client = AptosLedgerClient(
            base_url=settings.ledger_api_url,
            contract_address=settings.ledger_contract_address,
            timeout=settings.ledger_timeout_seconds,
            read_enabled=settings.ledger_read_enabled,
        )
        logger.info(f"✅ Ledger client ready: {settings.ledger_api_url}")

    @classmethod
    async def disconnect(cls):
        """Cierra el cliente HTTP"""
        if cls.client is not None:
            await cls.client.aclose()
            cls.client = None
            logger.info("❌ Ledger client closed")

    @classmethod
    def get_client(cls) -> LedgerClient:
        """Retorna el cliente del ledger"""
        if cls.client is None:
            raise RuntimeError("Ledger not connected. Call Ledger.connect() first.")
        return cls.client


# ============================================
# 🎯 DEPENDENCY para FastAPI
# ============================================

async def get_ledger_client() -> LedgerClient:
    """FastAPI dependency para inyectar el cliente del ledger"""
    return Ledger.get_client()
