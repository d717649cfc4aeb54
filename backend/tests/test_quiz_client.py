import sys
import os

import pytest
import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import quiz_client as client_module
from quiz_client import QuizClient, QuizClientError, map_generated_categories
import config


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


def tiers(title, points=config.POINT_TIERS):
    return [{"points": p, "text": f"{title} q{p}?", "answer": f"{title} a{p}"} for p in points]


class TestMapGeneratedCategories:
    def test_pads_missing_tiers_and_sorts(self):
        data = {"categories": [{"title": "Art", "questions": tiers("Art", (500, 100, 300))}]}
        category = map_generated_categories(data, ["Art"], "en")[0]
        assert [q.points for q in category.questions] == list(config.POINT_TIERS)
        assert category.questions[1].text.startswith("Extra 200-point question")
        assert not any(q.is_answered for q in category.questions)

    def test_caps_questions_at_five(self):
        data = {"categories": [{"title": "Art", "questions": tiers("Art") + tiers("More", (600,))}]}
        category = map_generated_categories(data, ["Art"], "it")[0]
        assert len(category.questions) == 5

    def test_duplicate_tiers_keep_first_and_pad_absent(self):
        questions = tiers("Art", (100, 200, 300, 400)) + [
            {"points": 100, "text": "Second 100?", "answer": "dup"},
            {"points": 400, "text": "Second 400?", "answer": "dup"},
            {"points": 250, "text": "Off-tier?", "answer": "odd"},
        ]
        data = {"categories": [{"title": "Art", "questions": questions}]}
        category = map_generated_categories(data, ["Art"], "en")[0]
        assert [q.points for q in category.questions] == list(config.POINT_TIERS)
        assert category.questions[0].text == "Art q100?"
        assert category.questions[3].text == "Art q400?"
        assert category.questions[4].text.startswith("Extra 500-point question")

    def test_strips_prefixes_and_capitalizes(self):
        data = {"categories": [{"title": "Art", "questions": [
            {"points": 100, "text": "Domanda: chi dipinse la Gioconda?", "answer": "risposta - leonardo"},
        ]}]}
        question = map_generated_categories(data, ["Art"], "it")[0].questions[0]
        assert question.text == "Chi dipinse la Gioconda?"
        assert question.answer == "Leonardo"
        assert question.type == "exact"

    def test_pads_missing_categories_from_topics(self):
        data = {"categories": [{"title": "Art", "questions": tiers("Art")}]}
        categories = map_generated_categories(data, ["Art", "Food", "Sport"], "en")
        assert [c.title for c in categories] == ["Art", "Food", "Sport"]
        assert categories[2].questions[0].text == "Sample question for Sport worth 100 points"

    def test_caps_categories_at_five(self):
        data = {"categories": [{"title": f"T{i}", "questions": tiers(f"T{i}")} for i in range(7)]}
        assert len(map_generated_categories(data, [], "en")) == 5

    def test_invalid_shape_raises(self):
        with pytest.raises(QuizClientError):
            map_generated_categories({"foo": 1}, ["A"], "en")
        with pytest.raises(QuizClientError):
            map_generated_categories({"categories": [{"title": "A"}]}, ["A"], "en")


class TestQuizClient:
    def test_generate_categories_success(self, monkeypatch):
        sent = {}

        def fake_post(url, json=None, timeout=None):
            sent.update(url=url, json=json)
            return FakeResponse(200, {"categories": [{"title": "Art", "questions": tiers("Art")}],
                                      "quizId": "q-1"})

        monkeypatch.setattr(client_module.requests, "post", fake_post)
        categories, quiz_id = QuizClient("http://relay").generate_categories(["Art"], "en-US")
        assert sent["url"] == "http://relay/generate-quiz"
        assert sent["json"] == {"categories": ["Art"], "lang": "en"}
        assert quiz_id == "q-1"
        assert categories[0].questions[0].text == "Art q100?"

    def test_generate_categories_falls_back_on_error(self, monkeypatch):
        def fake_post(url, json=None, timeout=None):
            raise requests.ConnectionError("down")

        monkeypatch.setattr(client_module.requests, "post", fake_post)
        categories, quiz_id = QuizClient("http://relay").generate_categories(["Art", "Food"], "it")
        assert quiz_id is None
        assert [c.title for c in categories] == ["Art", "Food"]
        assert categories[0].questions[0].text == "Domanda di esempio per Art da 100 punti"

    def test_fetch_random_categories(self, monkeypatch):
        def fake_get(url, params=None, timeout=None):
            assert url == "http://relay/random-quiz"
            assert params == {"lang": "it"}
            return FakeResponse(200, {"categories": [
                {"title": "Art", "questions": tiers("Art", (300, 100, 200, 500, 400))},
                {"id": "mystery", "title": "???", "questions": tiers("Mix")},
            ]})

        monkeypatch.setattr(client_module.requests, "get", fake_get)
        categories = QuizClient("http://relay/").fetch_random_categories()
        assert [c.title for c in categories] == ["Art", "???"]
        assert [q.points for q in categories[0].questions] == list(config.POINT_TIERS)
        assert categories[1].id != "mystery"

    def test_fetch_random_categories_raises_on_http_error(self, monkeypatch):
        monkeypatch.setattr(client_module.requests, "get",
                            lambda url, params=None, timeout=None: FakeResponse(500))
        with pytest.raises(QuizClientError):
            QuizClient("http://relay").fetch_random_categories("en")

    def test_fetch_random_categories_raises_on_bad_payload(self, monkeypatch):
        monkeypatch.setattr(client_module.requests, "get",
                            lambda url, params=None, timeout=None: FakeResponse(200, {"nope": []}))
        with pytest.raises(QuizClientError):
            QuizClient("http://relay").fetch_random_categories("en")
