from gemini_mcp.logger.gateway_logger import JsonLinesFormatter, configure_logging

__all__ = ["JsonLinesFormatter", "configure_logging"]
