# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""HTTP microservice that renders and relays invitation emails over SMTP.

The package exposes a single send operation plus a health probe and a static
API description:

- ``POST /send-invite-email`` validates the recipient and registration link,
  renders the invitation and hands it to the SMTP dispatcher
- ``GET /health`` for container monitoring
- ``GET /openapi.json`` and ``GET /docs`` for the API description

Example:
    Building the application from explicit settings::

        from invite_mail_service.api import create_app
        from invite_mail_service.config_loader import load_settings
        from invite_mail_service.mailer import create_dispatcher

        config = load_settings()
        app = create_app(config, create_dispatcher(config))
"""

__version__ = "1.0.0"
