# utils/config.py
import os


class Config:
    LOG_DIR = os.getenv("STOREFRONT_LOG_DIR", "data/logs")
    LOG_LEVEL = os.getenv("STOREFRONT_LOG_LEVEL", "INFO").upper()
    LOW_STOCK_THRESHOLD = int(os.getenv("STOREFRONT_LOW_STOCK_THRESHOLD", "5"))
