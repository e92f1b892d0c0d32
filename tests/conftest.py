import asyncio

import pytest

import activexml

HOST = "http://www.example.com:8080"


class MockClient:
    """replies from a table of canned responses, recording every request"""

    def __init__(self):
        self.responses = {}
        self.requests = []

    def respond(self, method, url, status=200, content=b"", headers=None):
        self.responses[(method, url)] = activexml.Response(
            status, content=content, headers=headers or {}
        )

    def send(self, req):
        self.requests.append(req)
        try:
            return self.responses[(req.method, req.url)]
        except KeyError:
            return activexml.Response(404, content=b"")

    async def send_async(self, req):
        await asyncio.sleep(0)
        return self.send(req)


activexml.send.register(MockClient, MockClient.send)
activexml.send_async.register(MockClient, MockClient.send_async)


@pytest.fixture
def client():
    return MockClient()


@pytest.fixture
def site(client):
    return activexml.Registry(HOST, client=client, async_client=client)
