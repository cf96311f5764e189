import aiosmtplib
import pytest

from invite_mail_service.config_loader import ServiceConfig
from invite_mail_service.errors import DeliveryError
from invite_mail_service.mailer import MailDispatcher, OutgoingMail, create_dispatcher


class DummySMTP:
    def __init__(self, hostname, port, use_tls=False, start_tls=None, **kwargs):
        self.hostname = hostname
        self.port = port
        self.use_tls = use_tls
        self.start_tls = start_tls
        self.login_credentials = None
        self.sent = []
        self.quit_called = False
        self.closed = False
        self.fail_on = None
        self.error = None

    def _maybe_fail(self, step):
        if self.fail_on == step:
            raise self.error

    async def connect(self):
        self._maybe_fail("connect")

    async def login(self, user, password):
        self._maybe_fail("login")
        self.login_credentials = (user, password)

    async def send_message(self, msg):
        self._maybe_fail("send")
        self.sent.append(msg)

    async def quit(self):
        self.quit_called = True
        self._maybe_fail("quit")

    def close(self):
        self.closed = True


@pytest.fixture
def smtp_factory(monkeypatch):
    created = []
    failure = {}

    def factory(**kwargs):
        smtp = DummySMTP(**kwargs)
        smtp.fail_on = failure.get("step")
        smtp.error = failure.get("error")
        created.append(smtp)
        return smtp

    monkeypatch.setattr("invite_mail_service.mailer.aiosmtplib.SMTP", factory)
    factory.created = created
    factory.failure = failure
    return factory


def make_mail(**overrides):
    values = dict(
        sender="Attendance Platform <mailer@example.com>",
        to="guest@example.com",
        subject="You're invited to Acme",
        text="Hi there,\n\nplain body",
        html="<p>Hi there,</p>",
    )
    values.update(overrides)
    return OutgoingMail(**values)


def test_create_dispatcher_requires_credentials():
    assert create_dispatcher(ServiceConfig()) is None
    assert create_dispatcher(ServiceConfig(smtp_user="u")) is None
    assert create_dispatcher(ServiceConfig(smtp_password="p")) is None

    dispatcher = create_dispatcher(ServiceConfig(smtp_user="u", smtp_password="p", smtp_port=587, smtp_secure=False))
    assert isinstance(dispatcher, MailDispatcher)
    assert dispatcher.port == 587
    assert dispatcher.secure is False


def test_build_message_is_multipart_alternative():
    dispatcher = MailDispatcher("smtp.local", 465, "u", "p", secure=True)
    msg = dispatcher.build_message(make_mail(reply_to="support@example.com"))

    assert msg["From"] == "Attendance Platform <mailer@example.com>"
    assert msg["To"] == "guest@example.com"
    assert msg["Subject"] == "You're invited to Acme"
    assert msg["Reply-To"] == "support@example.com"
    assert msg["Message-ID"].endswith("@example.com>")
    assert msg.get_content_type() == "multipart/alternative"
    assert msg.get_body(preferencelist=("plain",)).get_content().startswith("Hi there,")
    assert msg.get_body(preferencelist=("html",)).get_content().startswith("<p>Hi there,</p>")


def test_build_message_omits_reply_to():
    msg = MailDispatcher("smtp.local", 465, "u", "p", secure=True).build_message(make_mail())
    assert msg["Reply-To"] is None


@pytest.mark.asyncio
async def test_send_uses_implicit_tls_when_secure(smtp_factory):
    dispatcher = MailDispatcher("smtp.local", 465, "user", "pass", secure=True)

    message_id = await dispatcher.send(make_mail())

    smtp = smtp_factory.created[0]
    assert smtp.hostname == "smtp.local"
    assert smtp.use_tls is True
    assert smtp.start_tls is False
    assert smtp.login_credentials == ("user", "pass")
    assert len(smtp.sent) == 1
    assert smtp.quit_called is True
    assert message_id == smtp.sent[0]["Message-ID"]


@pytest.mark.asyncio
async def test_send_uses_opportunistic_starttls_otherwise(smtp_factory):
    dispatcher = MailDispatcher("smtp.local", 587, "user", "pass", secure=False)
    await dispatcher.send(make_mail())

    smtp = smtp_factory.created[0]
    assert smtp.use_tls is False
    assert smtp.start_tls is None


@pytest.mark.asyncio
async def test_each_send_opens_its_own_session(smtp_factory):
    dispatcher = MailDispatcher("smtp.local", 465, "user", "pass", secure=True)
    await dispatcher.send(make_mail())
    await dispatcher.send(make_mail())
    assert len(smtp_factory.created) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "step, error, reason",
    [
        ("connect", aiosmtplib.SMTPConnectError("connection refused"), "connection refused"),
        ("login", aiosmtplib.SMTPAuthenticationError(535, "bad credentials"), "bad credentials"),
        ("send", aiosmtplib.SMTPDataError(554, "message rejected"), "message rejected"),
        ("connect", ConnectionRefusedError("connection refused"), "connection refused"),
        ("connect", TimeoutError(), "SMTP operation timed out"),
    ],
)
async def test_send_wraps_transport_errors(smtp_factory, step, error, reason):
    smtp_factory.failure.update(step=step, error=error)
    dispatcher = MailDispatcher("smtp.local", 465, "user", "pass", secure=True)

    with pytest.raises(DeliveryError) as excinfo:
        await dispatcher.send(make_mail())

    assert reason in excinfo.value.message
    assert excinfo.value.to_payload()["delivered"] is False


@pytest.mark.asyncio
async def test_failed_quit_closes_transport(smtp_factory):
    smtp_factory.failure.update(step="quit", error=aiosmtplib.SMTPServerDisconnected("gone"))
    dispatcher = MailDispatcher("smtp.local", 465, "user", "pass", secure=True)

    message_id = await dispatcher.send(make_mail())

    smtp = smtp_factory.created[0]
    assert smtp.closed is True
    assert message_id is not None
