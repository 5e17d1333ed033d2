import structlog

from actnames.logging import UVICORN_LOG_CONFIG, configure_logging, get_logger


class TestConfigureLogging:
    def test_level_filters(self, capsys):
        configure_logging("warning")
        logger = get_logger("actnames.test")
        logger.info("dataset loaded")
        logger.warning("summary lookup failed", term="Cook")

        err = capsys.readouterr().err
        assert "summary lookup failed" in err
        assert "Cook" in err
        assert "dataset loaded" not in err

    def test_context_is_merged(self, capsys):
        configure_logging("INFO")
        structlog.contextvars.bind_contextvars(path="/explore")
        get_logger().info("explore")
        assert "/explore" in capsys.readouterr().err

    def test_uvicorn_config_uses_server_formatter(self):
        handlers = UVICORN_LOG_CONFIG["handlers"]
        assert {h["formatter"] for h in handlers.values()} == {"server"}
        assert UVICORN_LOG_CONFIG["loggers"]["uvicorn.access"]["propagate"] is False

    def test_uvicorn_shares_renderer(self):
        configure_logging("INFO")
        chain = structlog.get_config()["processors"]
        formatter = UVICORN_LOG_CONFIG["formatters"]["server"]
        assert formatter["processor"] is chain[-1]
        assert formatter["foreign_pre_chain"] == chain[:-1]
