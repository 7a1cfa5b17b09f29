"""Tests for the manual read mode."""

import math

import pytest

from turby.meas import ManualReadController
from turby.meas.manual import LABEL_PROMPT
from turby.types import LabeledSample, ValidationError
from turby.util import read_labeled_series


class ScriptedPrompt:
    """Answers prompts from a list, recording what was asked."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.asked = []

    def __call__(self, text):
        self.asked.append(text)
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer


@pytest.fixture
def output(tmp_path):
    return tmp_path / "manual.csv"


def test_two_samples(system, clock, output):
    prompt = ScriptedPrompt(["control", "", "", "treated", "", "", ""])
    controller = ManualReadController(system, output_path=output, sleep=clock.sleep)
    series = controller.run(prompt=prompt)

    assert [s.label for s in series] == ["control", "treated"]
    assert series[0].intensity == pytest.approx(5000.0)
    assert series[1].intensity == pytest.approx(1000 + 4000 * math.exp(-1 / 20))
    assert read_labeled_series(output) == series


def test_load_read_eject_sequence(system, clock, output):
    prompt = ScriptedPrompt(["a", "", "", "b", "", "", ""])
    ManualReadController(system, output_path=output, sleep=clock.sleep).run(prompt)
    # load, then read/reload per sample (measurement end is forward)
    assert system.chamber.flips == [False, True, False, True, False]
    assert system.lamp.history == [True, False, True, False]


def test_sensor_settles_after_configure(system, clock):
    ManualReadController(system, sleep=clock.sleep)
    assert system.sensor.configured
    assert clock.sleeps[-1] == 1.0


def test_blank_label_ends_session(system, clock, output):
    prompt = ScriptedPrompt(["   "])
    series = ManualReadController(system, output_path=output, sleep=clock.sleep).run(
        prompt
    )
    assert series == []
    assert read_labeled_series(output) == []
    assert system.sensor.nsamples == 0


def test_label_with_delimiter_reprompted(system, clock, output):
    prompt = ScriptedPrompt(["a,b", "a b", "", "", ""])
    series = ManualReadController(system, output_path=output, sleep=clock.sleep).run(
        prompt
    )
    assert [s.label for s in series] == ["a b"]
    assert prompt.asked[:2] == [LABEL_PROMPT, LABEL_PROMPT]


def test_written_when_interrupted(system, clock, output):
    prompt = ScriptedPrompt(["first", "", "", "second", KeyboardInterrupt()])
    controller = ManualReadController(system, output_path=output, sleep=clock.sleep)
    with pytest.raises(KeyboardInterrupt):
        controller.run(prompt)
    assert read_labeled_series(output) == [
        LabeledSample(label="first", intensity=pytest.approx(5000.0))
    ]
    assert not system.lamp.is_on


def test_without_output_path(system, clock):
    controller = ManualReadController(system, sleep=clock.sleep)
    series = controller.run(ScriptedPrompt(["x", "", "", ""]))
    assert len(series) == 1
    assert controller.series == series


def test_requires_started_system(system, clock):
    system.packdown()
    with pytest.raises(ValidationError):
        ManualReadController(system, sleep=clock.sleep)
