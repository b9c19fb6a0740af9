PASSWORD = "secret123"


class RecordingMailer:
    """Stands in for fastapi_mail.FastMail and keeps every message it is asked to send."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.messages = []

    async def send_message(self, message, template_name=None):
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        self.messages.append(message)


def register(client, email="anna@example.com", first_name="Anna", last_name="Kowalska", role=None, password=PASSWORD):
    body = {"email": email, "password": password, "first_name": first_name, "last_name": last_name}
    if role is not None:
        body["role"] = role
    return client.post("/api/auth/register", json=body)


def login(client, email="anna@example.com", password=PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def submit_leave(client, token, files=None, **overrides):
    data = {
        "leave_type": "Annual",
        "start_date": "2024-06-01",
        "end_date": "2024-06-03",
        "reason": "Family holiday at the seaside",
    }
    data.update(overrides)
    return client.post("/api/leaves", data=data, files=files, headers=auth_headers(token))
