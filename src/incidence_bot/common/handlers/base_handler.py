"""
Base Handler for scheduled jobs.

Common functionality for all job handlers.
"""

import json
import logging
import os
import traceback
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional


class BaseHandler(ABC):
    """
    Abstract base handler for scheduled jobs.

    Provides common functionality:
    - Logging setup
    - Error containment (nothing raised from process() escapes handle())
    - Result envelope formatting
    """

    def __init__(self, logger_name: Optional[str] = None, log_level: Optional[str] = None):
        self.logger = logging.getLogger(logger_name or self.__class__.__name__)
        self._setup_logging(log_level)

    def _setup_logging(self, log_level: Optional[str] = None) -> None:
        """Configure logging from log_level, falling back to LOG_LEVEL."""
        log_level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
        self.logger.setLevel(getattr(logging, log_level, logging.INFO))

        if not self.logger.handlers and not logging.getLogger().handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                "[%(levelname)s] %(asctime)s - %(name)s - %(message)s"
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def handle(
        self,
        event: Optional[Dict[str, Any]] = None,
        context: Any = None,
    ) -> Dict[str, Any]:
        """
        Main entry point for a job run.

        Args:
            event: Optional run parameters
            context: Optional caller context

        Returns:
            Result envelope dictionary
        """
        event = event or {}
        request_id = getattr(context, "request_id", None) or str(uuid.uuid4())[:8]
        start_time = datetime.now()

        self.logger.info(f"Run {request_id} started")
        self.logger.debug(f"Event: {json.dumps(event, default=str)[:500]}")

        try:
            result = self.process(event, context)

            duration = (datetime.now() - start_time).total_seconds()
            self.logger.info(f"Run {request_id} completed in {duration:.2f}s")

            return self._success_response(result, request_id)

        except ValueError as e:
            self.logger.warning(f"Validation error: {e}")
            return self._error_response(str(e), request_id)

        except Exception as e:
            self.logger.error(f"Unhandled error: {e}")
            self.logger.error(traceback.format_exc())
            return self._error_response("Internal error", request_id)

    @abstractmethod
    def process(self, event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        """
        Process one job run.

        Override in subclasses.

        Args:
            event: Run parameters
            context: Caller context

        Returns:
            Processing result dictionary
        """
        pass

    def _success_response(self, result: Dict[str, Any], request_id: str) -> Dict[str, Any]:
        """Create success envelope."""
        return {
            "success": True,
            "request_id": request_id,
            "timestamp": datetime.now().isoformat(),
            "data": result,
        }

    def _error_response(self, message: str, request_id: str) -> Dict[str, Any]:
        """Create error envelope."""
        return {
            "success": False,
            "request_id": request_id,
            "timestamp": datetime.now().isoformat(),
            "error": message,
        }

    def _parse_body(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """Parse request body from event."""
        body = event.get("body", {})
        if isinstance(body, str):
            try:
                return json.loads(body)
            except json.JSONDecodeError:
                return {}
        return body or {}
