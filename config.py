"""App-wide configuration and environment settings."""

import os

import streamlit as st
from dotenv import load_dotenv

load_dotenv()  # Load from .env file

def get_secret(key, default=None):
    """Try st.secrets first, then os.getenv."""
    try:
        # Accessing st.secrets raises FileNotFoundError if no secrets.toml exists locally
        if key in st.secrets:
            return st.secrets[key]
    except (FileNotFoundError, AttributeError, KeyError):
        pass
    return os.getenv(key, default)

# LLM (Google Gemini)
GOOGLE_API_KEY = get_secret("GOOGLE_API_KEY", "")
LLM_MODEL = get_secret("LLM_MODEL", "gemini-2.5-pro")
LLM_TEMPERATURE = float(get_secret("LLM_TEMPERATURE", "0.1"))  # Scoring task, keep decoding near-deterministic

# Document intake
MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB
ACCEPTED_MIME_TYPES = ("application/pdf", "image/jpeg", "image/png", "image/webp")
ACCEPTED_EXTENSIONS = ["pdf", "jpg", "jpeg", "png", "webp"]

# Session
UPLOAD_DELAY_SECONDS = float(os.getenv("UPLOAD_DELAY_SECONDS", "0.8"))  # Cosmetic "Reading Document..." pause

# LangSmith
LANGSMITH_TRACING = os.getenv("LANGSMITH_TRACING", "false").lower() in ("true", "1")
LANGSMITH_PROJECT = os.getenv("LANGSMITH_PROJECT", "credit-analyzer")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
