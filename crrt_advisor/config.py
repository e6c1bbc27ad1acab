"""
CRRT Circuit Advisor - Configuration
====================================
Centralised config for the explanation model, logging and system prompt.
Loads secrets from the project-level .env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or ""
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_TEMPERATURE: float = float(os.getenv("GEMINI_TEMPERATURE", "0.3"))
GEMINI_TIMEOUT_SECONDS: int = int(os.getenv("GEMINI_TIMEOUT_SECONDS", "30"))

# Language the narrative answers are written in
RESPONSE_LANGUAGE: str = os.getenv("RESPONSE_LANGUAGE", "English")

# ── Logging ─────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE: str = os.getenv("LOG_FILE", "")

# ── Explanation persona ─────────────────────────────────────────────────
SYSTEM_PROMPT = (
    "You are a specialized medical AI assistant focusing on Nephrology and Blood "
    "Purification (Hemodialysis, CRRT, Plasma Exchange).\n\n"
    "Your goal is to explain complex medical mechanics clearly to patients, "
    "students, or medical staff.\n\n"
    "Context: The user is asking about clogging or coagulation in blood "
    "purification circuits.\n\n"
    "Tone: Professional, informative, empathetic, and scientifically accurate "
    "but accessible.\n\n"
    "Formatting:\n"
    "- Use Markdown.\n"
    "- Use bolding for key terms.\n"
    "- Use bullet points for lists of factors.\n"
    "- Structure your answer with clear sections (e.g. Core Causes, "
    "Physiological Mechanisms, Prevention).\n\n"
    "Language: Respond in {language} unless the user switches languages."
)
