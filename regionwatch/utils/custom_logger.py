import inspect
import logging
from opentelemetry import trace


class CustomLogger:
    """override the python logger to include the region being worked on with every record"""

    def __init__(self, name, level=logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

    def get_region_id(self):
        """retrieve the id of the region from the caller's stack"""
        try:
            stack = inspect.stack()
            for frame_info in stack[1:]:
                frame = frame_info.frame
                found = frame.f_locals.get("region")
                if found is not None and getattr(found, "id", None) is not None:
                    return str(found.id)
                found = frame.f_locals.get("region_id")
                if isinstance(found, str):
                    return found
        except Exception as error:
            self.logger.error("An error occurred while getting region id: %s", str(error))
        return ""

    def get_trace_context(self):
        """Get current trace and span context for log correlation"""
        try:
            current_span = trace.get_current_span()
            if current_span and current_span.is_recording():
                span_context = current_span.get_span_context()
                return {
                    "trace_id": f"{span_context.trace_id:032x}",
                    "span_id": f"{span_context.span_id:016x}",
                    "trace_flags": span_context.trace_flags,
                }
        except Exception:
            # logging this would recurse
            pass
        return {}

    def _extra(self):
        region_id = self.get_region_id()
        caller_name = inspect.stack()[2].function
        return {"caller_name": caller_name, "region_id": region_id, **self.get_trace_context()}

    def info(self, *args):
        """call logger.info with the caller_name and the region id"""
        self.logger.info(*args, extra=self._extra())

    def error(self, *args):
        """call logger.error with the caller_name and the region id"""
        self.logger.error(*args, extra=self._extra())

    def debug(self, *args):
        """call logger.debug with the caller_name and the region id"""
        self.logger.debug(*args, extra=self._extra())

    def exception(self, *args):
        """call logger.exception with the caller_name and the region id"""
        self.logger.exception(*args, extra=self._extra())

    def warning(self, *args):
        """call logger.warning with the caller_name and the region id"""
        self.logger.warning(*args, extra=self._extra())
