import pytest

from models import validate


class ScriptedOracle:
    """Returns canned responses in order and records every instruction it was sent."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.instructions = []

    def complete(self, instruction):
        self.instructions.append(instruction)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def three_slides():
    return validate({
        "type": "presentation",
        "title": "Quarterly Review",
        "slides": [
            {"title": "Agenda", "content": ["Results", "Risks", "Next steps"]},
            {"title": "Results", "content": ["Revenue up 12%", "Churn flat"]},
            {"title": "Next steps", "content": ["Hire two engineers"]},
        ],
    })


@pytest.fixture
def scripted_oracle():
    return ScriptedOracle
