import os

from app.core.env import load_env

load_env()

# credentials are NOT read here; gateways look them up at call time

DEEPGRAM_BASE_URL = os.getenv("DEEPGRAM_BASE_URL", "https://api.deepgram.com/v1/listen")
DEEPGRAM_MODEL = os.getenv("DEEPGRAM_MODEL", "nova-2")
DEEPGRAM_LANGUAGE = os.getenv("DEEPGRAM_LANGUAGE", "multi")

GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/models")
GEMINI_MODEL_REFINE = os.getenv("GEMINI_MODEL_REFINE", "gemini-1.5-pro")
GEMINI_MODEL_EXTRACT = os.getenv("GEMINI_MODEL_EXTRACT", "gemini-1.5-pro")

OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_MODEL_EXTRACT = os.getenv("OPENAI_MODEL_EXTRACT", "gpt-4o-mini")

OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/api")
OLLAMA_MODEL_EXTRACT = os.getenv("OLLAMA_MODEL_EXTRACT", "llama3.2")

HF_MODEL_EXTRACT = os.getenv("HF_MODEL_EXTRACT", "meta-llama/Llama-3.1-8B-Instruct")

EXTRACTION_VENDOR = os.getenv("EXTRACTION_VENDOR", "gemini").strip().lower()

LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "1024"))
VENDOR_TIMEOUT_S = int(os.getenv("VENDOR_TIMEOUT_S", "90"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
