import uvicorn

from invite_mail_service.config_loader import load_settings
from invite_mail_service.logger import configure_logging
from invite_mail_service.server import build_app


if __name__ == "__main__":
    settings = load_settings()
    configure_logging(settings.log_level)
    app = build_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)
