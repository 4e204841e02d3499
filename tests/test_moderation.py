import asyncio

import pytest

import handlers.moderation as moderation_handlers
from config import settings
from models import InboundMessage, MatchResult, ModerationDecision, Verdict
from services.matcher import KeywordMatcher
from services.moderation import ModerationService, preview
from services.probation import ProbationStoreError
from utils.labels import build_log_text, chat_label, user_label

FLAGGED = 1230480769


class FakeCounter:
    def __init__(self, fail: bool = False):
        self.counts: dict[int, int] = {}
        self.fail = fail

    async def record_and_get(self, user_id: int) -> int:
        if self.fail:
            raise ProbationStoreError("store down")
        self.counts[user_id] = self.counts.get(user_id, 0) + 1
        return self.counts[user_id]

    async def peek(self, user_id: int) -> int:
        return self.counts.get(user_id, 0)


def _service(counter=None, **kwargs) -> ModerationService:
    return ModerationService(
        KeywordMatcher(["scam", "crypto", "buy now"]),
        counter or FakeCounter(),
        frozenset({FLAGGED}),
        **kwargs,
    )


def _msg(text=None, user_id=1, caption=None, **kwargs) -> InboundMessage:
    return InboundMessage(user_id=user_id, chat_id=-100, message_id=7, text=text, caption=caption, **kwargs)


def _decide_many(service, messages):
    async def run():
        return [await service.decide(m) for m in messages]

    return asyncio.run(run())


def test_probation_window_then_trusted():
    service = _service()
    decisions = _decide_many(service, [_msg("total scam")] * 7)

    assert [d.probation_count for d in decisions] == [1, 2, 3, 4, 5, 6, 7]
    assert [d.enforce for d in decisions] == [True] * 5 + [False] * 2
    assert decisions[5].verdict is Verdict.TRUSTED
    assert decisions[0].result.keyword == "scam"


def test_always_moderated_user_never_leaves_probation():
    service = _service()
    decisions = _decide_many(service, [_msg("scam", user_id=FLAGGED)] * 8)

    assert all(d.enforce for d in decisions)
    assert all(d.always_moderated for d in decisions)


def test_clean_text_is_not_enforced():
    decision = _decide_many(_service(), [_msg("hello everyone")])[0]
    assert decision.verdict is Verdict.CLEAN
    assert not decision.enforce
    assert decision.probation_count == 1


def test_caption_used_when_text_missing():
    decision = _decide_many(_service(), [_msg(caption="cryptos for sale")])[0]
    assert decision.enforce
    assert decision.result == MatchResult(matched=True, keyword="crypto", plural=True)


def test_message_without_text_still_counted():
    counter = FakeCounter()
    decisions = _decide_many(_service(counter), [_msg(), _msg("scam")])

    assert decisions[0].verdict is Verdict.NO_TEXT
    assert not decisions[0].enforce
    assert decisions[1].probation_count == 2


def test_missing_user_is_not_counted():
    counter = FakeCounter()
    decision = _decide_many(_service(counter), [_msg("scam", user_id=None)])[0]

    assert decision.verdict is Verdict.NO_USER
    assert not decision.enforce
    assert counter.counts == {}


def test_store_failure_fail_closed_still_filters():
    service = _service(FakeCounter(fail=True))
    decision = _decide_many(service, [_msg("scam")])[0]

    assert decision.enforce
    assert decision.probation_count is None
    assert decision.store_error == "store down"


def test_store_failure_fail_open_skips_filter():
    service = _service(FakeCounter(fail=True), store_failure_policy="open")
    decision = _decide_many(service, [_msg("scam")])[0]

    assert decision.verdict is Verdict.STORE_UNAVAILABLE
    assert not decision.enforce
    assert decision.store_error == "store down"


def test_invalid_settings_rejected():
    with pytest.raises(ValueError):
        _service(store_failure_policy="maybe")
    with pytest.raises(ValueError):
        _service(probation_limit=-1)


def test_preview_truncation():
    assert preview("short") == "short"
    assert preview("x" * 200) == "x" * 200
    cut = preview("y" * 250)
    assert cut == "y" * 200 + "…"


def test_labels():
    assert chat_label(_msg(chat_title="Spam Haven", chat_username="haven")) == "Spam Haven"
    assert chat_label(_msg(chat_username="haven")) == "@haven"
    assert chat_label(_msg()) == "-100"

    assert user_label(_msg(username="bob", first_name="Bob")) == "@bob"
    assert user_label(_msg(first_name="Bob", last_name="Smith")) == "Bob Smith"
    assert user_label(_msg(first_name="Bob")) == "Bob"
    assert user_label(_msg()) == "1"


def test_build_log_text():
    message = _msg("z" * 300, username="spammer", chat_title="Group")
    decision = ModerationDecision(
        Verdict.MATCHED, MatchResult(True, "crypto", plural=True), probation_count=3
    )
    lines = build_log_text(message, decision).split("\n")

    assert lines[0] == "🧹 Deleted (probation 3/5)"
    assert lines[1] == "Chat: Group"
    assert lines[2] == "User: @spammer (id 1)"
    assert lines[3] == "Keyword: crypto (plural)"
    assert lines[4] == "Text: " + "z" * 200 + "…"


class FakeBot:
    def __init__(self, fail_delete: bool = False):
        self.calls: list[tuple[str, dict]] = []
        self.fail_delete = fail_delete

    async def delete_message(self, **kwargs):
        self.calls.append(("deleteMessage", kwargs))
        if self.fail_delete:
            raise RuntimeError("boom")
        return True

    async def send_message(self, **kwargs):
        self.calls.append(("sendMessage", kwargs))


def test_dispatch_enforcement_deletes_and_logs(monkeypatch):
    monkeypatch.setattr(
        moderation_handlers, "settings", settings.model_copy(update={"LOG_CHANNEL_ID": "-1009"})
    )
    bot = FakeBot()
    message = _msg("scam", username="spammer")
    decision = ModerationDecision(Verdict.MATCHED, MatchResult(True, "scam"), probation_count=1)

    async def run():
        tasks = moderation_handlers.dispatch_enforcement(bot, message, decision)
        await asyncio.gather(*tasks)

    asyncio.run(run())

    methods = dict(bot.calls)
    assert methods["deleteMessage"] == {"chat_id": -100, "message_id": 7}
    assert methods["sendMessage"]["chat_id"] == "-1009"
    assert methods["sendMessage"]["disable_web_page_preview"] is True
    assert "Keyword: scam" in methods["sendMessage"]["text"]


def test_dispatch_enforcement_failure_does_not_block_log(monkeypatch):
    monkeypatch.setattr(
        moderation_handlers, "settings", settings.model_copy(update={"LOG_CHANNEL_ID": "-1009"})
    )
    bot = FakeBot(fail_delete=True)
    message = _msg("scam")
    decision = ModerationDecision(Verdict.MATCHED, MatchResult(True, "scam"), probation_count=1)

    async def run():
        tasks = moderation_handlers.dispatch_enforcement(bot, message, decision)
        return await asyncio.gather(*tasks, return_exceptions=True)

    results = asyncio.run(run())
    assert isinstance(results[0], RuntimeError)
    assert [name for name, _ in bot.calls] == ["deleteMessage", "sendMessage"]
    assert not moderation_handlers._background
