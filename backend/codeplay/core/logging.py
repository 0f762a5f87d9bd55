import logging, json, sys

# Passed through `extra=` by the proxy and the client so a run can be
# followed across log lines.
CONTEXT_FIELDS = ("language", "runtime", "client", "status_code", "outcome")


class JsonFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(level: int = logging.INFO, quiet: tuple[str, ...] = ("httpx", "httpcore")):
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [h]
    # transport libraries log every request at INFO
    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
