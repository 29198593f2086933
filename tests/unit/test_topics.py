"""
Unit tests for keyword topic classification.
"""

from netquiz.core.mastery import QuestionStat
from netquiz.core.models import Question
from netquiz.core.topics import DEFAULT_TOPIC, classify_topic, get_topic_stats, topic_of


class TestClassifyTopic:
    def test_routing_keywords(self):
        text = "Which OSPF setting changes the administrative distance of a static route?"
        assert classify_topic(text) == "Routing & Switching Protocols"

    def test_case_insensitive(self):
        assert classify_topic("what does a WIRELESS heat map show about the SSID?") == "Wireless Networking"

    def test_no_hits_falls_back(self):
        assert classify_topic("Choose one.") == DEFAULT_TOPIC

    def test_parser_topic_wins(self):
        question = Question(id="1", text="Which OSPF area is the backbone?", topic="Exam Objectives")
        assert topic_of(question) == "Exam Objectives"


class TestTopicStats:
    def test_breakdown(self, question_factory):
        bank = [
            question_factory(1, topic="Wireless Networking"),
            question_factory(2, topic="Wireless Networking"),
            question_factory(3, topic="Wireless Networking"),
            question_factory(4, topic="Network Security"),
        ]
        stats = {
            "q1": QuestionStat(attempts=3, correct=3, streak=3),
            "q2": QuestionStat(attempts=1, incorrect=1, streak=-1),
        }

        topics = get_topic_stats(bank, stats)

        wireless = topics["Wireless Networking"]
        assert (wireless.total, wireless.attempted, wireless.correct) == (3, 2, 3)
        assert (wireless.mastered, wireless.review, wireless.weak, wireless.unseen) == (1, 0, 1, 1)
        assert round(wireless.mastery_percent) == 33
        assert topics["Network Security"].unseen == 1

    def test_empty(self):
        assert get_topic_stats([], {}) == {}
