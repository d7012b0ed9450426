import pytest
import requests

from config import AIConfiguration, Provider
from orchestrator.errors import InvalidHostError, InvalidResponseError, UnreachableEndpointError
from orchestrator.llm_ollama import OllamaClient, resolve_url
from orchestrator.models import Message, Role, image_part, text_part


class FakeResponse:

    def __init__(self, status_code=200, payload=None):

        self.status_code = status_code
        self.payload = payload

    def json(self):

        if self.payload is None:
            raise ValueError("no json")
        return self.payload


class FakeSession:

    def __init__(self, response=None, error=None):

        self.response = response
        self.error = error
        self.requests = []

    def _reply(self, method, url, **kwargs):

        self.requests.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.response

    def get(self, url, **kwargs):

        return self._reply("GET", url, **kwargs)

    def post(self, url, **kwargs):

        return self._reply("POST", url, **kwargs)


CONFIG = AIConfiguration(ollama_host="http://localhost", ollama_port=11434)


@pytest.mark.parametrize("host, expected", [
    ("http://localhost", "http://localhost:11434/api/tags"),
    ("localhost", "http://localhost:11434/api/tags"),
    ("  192.168.1.20 ", "http://192.168.1.20:11434/api/tags"),
    ("https://ollama.example.com:8080/base", "https://ollama.example.com:11434/api/tags"),
    ("localhost:9999", "http://localhost:11434/api/tags"),
])
def test_resolve_url(host, expected):

    assert resolve_url(host, 11434, "/api/tags") == expected


@pytest.mark.parametrize("host", ["", "   ", "http://"])
def test_resolve_url_rejects_empty_host(host):

    with pytest.raises(InvalidHostError):
        resolve_url(host, 11434, "/api/tags")


def test_list_models():

    session = FakeSession(FakeResponse(200, {"models": [{"name": "llama3:8b"}, {"name": "qwen2.5"}]}))

    models = OllamaClient(session=session).list_models(CONFIG)

    assert [(m.id, m.provider, m.context_length) for m in models] == [
        ("llama3:8b", Provider.OLLAMA, None),
        ("qwen2.5", Provider.OLLAMA, None),
    ]
    assert session.requests[0][:2] == ("GET", "http://localhost:11434/api/tags")


def test_list_models_rejects_non_200():

    with pytest.raises(InvalidResponseError):
        OllamaClient(session=FakeSession(FakeResponse(500, {}))).list_models(CONFIG)


def test_list_models_rejects_malformed_body():

    with pytest.raises(InvalidResponseError):
        OllamaClient(session=FakeSession(FakeResponse(200, {"unexpected": []}))).list_models(CONFIG)


@pytest.mark.parametrize("error", [requests.ConnectionError("refused"), requests.Timeout("slow")])
def test_connectivity_errors_become_unreachable(error):

    client = OllamaClient(session=FakeSession(error=error))

    with pytest.raises(UnreachableEndpointError) as exc:
        client.list_models(CONFIG)

    assert exc.value.target == "Ollama at http://localhost:11434"


def test_other_transport_errors_pass_through():

    client = OllamaClient(session=FakeSession(error=requests.TooManyRedirects("loop")))

    with pytest.raises(requests.TooManyRedirects):
        client.list_models(CONFIG)


def test_availability_never_raises():

    assert OllamaClient(session=FakeSession(FakeResponse(200, {"models": []}))).check_availability(CONFIG)
    assert not OllamaClient(session=FakeSession(FakeResponse(404))).check_availability(CONFIG)
    assert not OllamaClient(session=FakeSession(error=requests.ConnectionError())).check_availability(CONFIG)
    assert not OllamaClient(session=FakeSession()).check_availability(CONFIG.model_copy(update={"ollama_host": ""}))


def test_generate_response_posts_non_streaming_chat():

    session = FakeSession(FakeResponse(200, {"message": {"role": "assistant", "content": "Hello"}}))
    messages = [
        Message.from_text(Role.SYSTEM, "tools..."),
        Message(role=Role.USER, parts=(text_part("look"), image_part("data:image/png;base64,AAAA"))),
    ]

    response = OllamaClient(session=session).generate_response(CONFIG, "llama3", messages)

    method, url, kwargs = session.requests[0]
    assert (method, url) == ("POST", "http://localhost:11434/api/chat")
    assert kwargs["json"] == {
        "model": "llama3",
        "messages": [
            {"role": "system", "content": "tools..."},
            {"role": "user", "content": "look", "images": ["AAAA"]},
        ],
        "stream": False,
    }
    assert response.text == "Hello"
    assert response.tool_invocations == []


@pytest.mark.parametrize("response", [FakeResponse(200, {}), FakeResponse(200, {"message": {}}), FakeResponse(200, None), FakeResponse(400, {})])
def test_generate_response_requires_content(response):

    with pytest.raises(InvalidResponseError):
        OllamaClient(session=FakeSession(response)).generate_response(CONFIG, "llama3", [])
