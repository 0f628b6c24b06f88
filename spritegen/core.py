import logging
import logging.handlers
import os
import sys
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

BASE = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# ---------------- Logging ----------------


_LOGGER_NAMES = set()


def get_logger(name="spritegen", log_file=None):
    logger = logging.getLogger(name)
    _LOGGER_NAMES.add(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    fmt = logging.Formatter(
        '{"ts":"%(asctime)s","level":"%(levelname)s","step":"%(name)s","msg":"%(message)s"}'
    )
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)
    logger.addHandler(sh)
    if log_file:
        os.makedirs(os.path.dirname(log_file), exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=5)
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    return logger


log = get_logger("spritegen")

# ---------------- Config Models ----------------


class LoggingCfg(BaseModel):
    level: str = "INFO"
    log_file: Optional[str] = None


class OutputCfg(BaseModel):
    png_compress_level: int = Field(default=6, ge=0, le=9)
    optimize: bool = False


class RemoteCfg(BaseModel):
    endpoint: str = "https://api.bfl.ai/v1/flux-2-pro"
    api_key_env: str = "FLUX_API_KEY"
    poll_interval_s: float = 0.4
    request_timeout_s: float = 30.0


class GlobalCfg(BaseModel):
    logging: LoggingCfg = Field(default_factory=LoggingCfg)
    output: OutputCfg = Field(default_factory=OutputCfg)
    remote: RemoteCfg = Field(default_factory=RemoteCfg)


def load_yaml(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(path: Optional[str] = None) -> GlobalCfg:
    if path is None:
        path = os.path.join(BASE, "conf", "spritegen.yaml")
        if not os.path.exists(path):
            path = os.path.join(BASE, "conf", "spritegen.example.yaml")
    raw = load_yaml(path) if os.path.exists(path) else {}

    try:
        cfg = GlobalCfg(**raw)
    except ValidationError as e:
        log.error(f"Config validation failed: {e}")
        raise

    if cfg.logging.log_file and not os.path.isabs(cfg.logging.log_file):
        cfg.logging.log_file = os.path.join(BASE, cfg.logging.log_file)
    return cfg


def configure_logging(cfg: Optional[GlobalCfg] = None):
    """Apply the `logging` config section to every logger made by get_logger."""
    cfg = cfg or load_config()
    level = getattr(logging, cfg.logging.level.upper(), logging.INFO)
    for name in sorted(_LOGGER_NAMES):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        if cfg.logging.log_file and not any(
            isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers
        ):
            os.makedirs(os.path.dirname(cfg.logging.log_file), exist_ok=True)
            fh = logging.handlers.RotatingFileHandler(
                cfg.logging.log_file, maxBytes=5_000_000, backupCount=5
            )
            fh.setFormatter(logger.handlers[0].formatter if logger.handlers else None)
            logger.addHandler(fh)
    return level


# ---------------- Env ----------------


def load_env() -> dict:
    load_dotenv(os.path.join(BASE, ".env"))
    env = {k: v for k, v in os.environ.items()}
    return env
