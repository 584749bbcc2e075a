"""
Structured logging for use-case store operations, validation failures and slot reads.
"""

import logging
from typing import Any, Dict

from src.core.config import debug_enabled


class StructuredLogger:
    """Structured logger for inspection use-case operations."""

    def __init__(self, name: str = "inspection_usecases"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if debug_enabled() else logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "error"):
            self.logger.error(message)
        elif status in ("rejected", "not_found", "degraded"):
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_use_case_operation(self, operation: str, use_case_id: str, status: str = "success", details: Dict[str, Any] = None):
        """Log a store operation against a single use case."""
        log_details = {"use_case_id": use_case_id}
        if details:
            log_details.update(details)

        self.log_operation(f"use_case.{operation}", status, log_details)

    def log_validation_error(self, operation: str, errors: Dict[str, str], draft: Dict[str, Any] = None):
        """Log draft validation errors with sanitized details."""
        log_details = {
            "operation": operation,
            "fields": list(errors),
            "errors": [str(message)[:100] for message in errors.values()],
            "error_count": len(errors)
        }

        if isinstance(draft, dict) and "name" in draft:
            log_details["draft_name"] = sanitize_payload(draft["name"])

        self.log_operation("validation.error", "rejected", log_details)

    def log_slot_read_error(self, key: str, error: Any):
        """Log a slot blob that could not be deserialized."""
        log_details = {
            "key": key,
            "error": str(error)[:200],
            "fallback": "empty_collection"
        }
        self.log_operation("slot.read", "degraded", log_details)

    def log_record_skipped(self, index: int, error: Any):
        """Log a stored record that was dropped while reading the slot."""
        log_details = {
            "index": index,
            "error": str(error)[:200]
        }
        self.log_operation("slot.record", "degraded", log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


def sanitize_payload(payload: Any, max_length: int = 50) -> Any:
    """Truncate payloads for logging."""
    if isinstance(payload, dict):
        return {k: sanitize_payload(v, max_length) for k, v in payload.items()}
    elif isinstance(payload, str):
        return payload[:max_length] + "..." if len(payload) > max_length else payload
    elif isinstance(payload, list):
        return [sanitize_payload(item, max_length) for item in payload]
    else:
        return payload


# Global logger instance
logger = StructuredLogger()
