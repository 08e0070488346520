# app/config.py

import os
from dotenv import load_dotenv

load_dotenv()

# HTTP 서버 설정
HOST = os.getenv("FOREX_HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3001))
MCP_PATH = "/mcp"

# MCP 서버 메타데이터
SERVER_NAME = "live-forex-converter"
SERVER_VERSION = "1.0.0"
PROTOCOL_VERSION = "2024-11-05"

# 환율 API 설정 (exchangerate-api.com, API 키 불필요)
RATES_API_BASE = os.getenv("RATES_API_BASE", "https://api.exchangerate-api.com/v4/latest")
RATES_CACHE_TTL_SECONDS = float(os.getenv("RATES_CACHE_TTL_SECONDS", 10 * 60))
RATES_TIMEOUT_SECONDS = float(os.getenv("RATES_TIMEOUT_SECONDS", 5.0))

# 로깅
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
