"""
Configuración de la app cargada desde variables de entorno (.env)

Todo lo que varía entre desarrollo/producción va aquí
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # MongoDB - almacén local de puntuaciones y claims
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "quiz_leaderboard"  # Nombre de la base de datos

    # JWT - para firmar los tokens de identidad (wallet conectada)
    jwt_secret: str  # Una cadena larga y aleatoria
    jwt_algorithm: str = "HS256"  # Algoritmo de encriptación
    jwt_expire_minutes: int = 60 * 24  # Los tokens expiran en 1 día

    # App
    app_env: str = "development"  # o "production"
    debug: bool = False
    log_level: str = "INFO"

    # CORS - de dónde pueden venir los requests
    cors_origins: str = "http://localhost:5173"  # URLs separadas por coma

    # ==================== Almacén de puntuaciones ====================
    # - "mongo": persistente en MongoDB (sobrevive reinicios)
    # - "memory": diccionario en memoria del proceso (desarrollo/testing)
    score_store_backend: str = "mongo"

    # ==================== Ledger (Aptos) ====================
    # Si no hay URL, todas las escrituras van directo al almacén local (modo degradado)
    ledger_api_url: str | None = None  # "https://fullnode.testnet.aptoslabs.com/v1"
    ledger_contract_address: str = "0xe951aac52d1581381c4428d16d4e4146b635630dc1c05d2ff40d987539da4488"
    ledger_timeout_seconds: float = 15.0
    # El contrato expone una view function get_score para refrescar la caché local
    ledger_read_enabled: bool = False

    # ==================== Quiz ====================
    reveal_delay_seconds: float = 1.5  # Pausa para ver la respuesta correcta
    points_per_correct: int = 10
    max_score: int = 100  # 10 preguntas x 10 puntos

    # ==================== Recompensas ====================
    reward_top_n: int = 3  # Solo el top 3 puede reclamar
    # Cambiar el epoch reinicia el historial de claims
    leaderboard_epoch: int = 1

    class Config:
        env_file = ".env"  # Lee desde el archivo .env
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignora campos extras del .env que no estén en el modelo


@lru_cache()
def get_settings() -> Settings:
    """Retorna la instancia de configuración (cacheada para no releerla)"""
    return Settings()
