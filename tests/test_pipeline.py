import pytest
from conftest import assert_consistent, response_json, tx

from reconciler.models import Document
from reconciler.pipeline import StatementAnalyzer
from reconciler.prompts import CHUNK_INSTRUCTION, DIRECT_INSTRUCTION
from reconciler.splitter import PageSplitter

JANUARY = {"January 2024": [tx()]}


def test_small_document_uses_one_direct_call(make_pdf, scripted_extractor, recording_sleep):
    extractor = scripted_extractor([response_json(JANUARY)])
    outcome = StatementAnalyzer(extractor, sleep=recording_sleep).analyze_chunked(make_pdf(5))

    assert outcome.success
    assert outcome.chunks_processed == 1
    assert len(extractor.calls) == 1
    assert extractor.calls[0][1] == DIRECT_INSTRUCTION
    assert recording_sleep.calls == []
    assert outcome.result.account_number == "1514"
    assert outcome.result.total_income == pytest.approx(1000.0)


def test_large_document_is_chunked_and_paced(make_pdf, scripted_extractor, recording_sleep):
    extractor = scripted_extractor(
        [
            response_json({"March 2024": [tx(date="2024-03-01", amount=10.0)]}),
            response_json({"March 2024": [tx(date="2024-03-01", amount=10.0)], "February 2024": [tx(date="2024-02-02")]}),
            response_json({"January 2024": [tx(date="2024-01-03", type="zelle", description="Zelle from Ann")]}, account_number="N/A"),
        ]
    )
    outcome = StatementAnalyzer(extractor, sleep=recording_sleep).analyze_chunked(make_pdf(25))

    assert outcome.success
    assert outcome.chunks_processed == 3
    assert [instruction for _, instruction in extractor.calls] == [CHUNK_INSTRUCTION] * 3
    assert [document.name for document, _ in extractor.calls] == [
        "statement.pdf_chunk_1",
        "statement.pdf_chunk_2",
        "statement.pdf_chunk_3",
    ]
    assert recording_sleep.calls == [90.0, 90.0]

    result = outcome.result
    assert [bucket.month for bucket in result.months] == ["March 2024", "February 2024", "January 2024"]
    assert result.total_transactions == 3
    assert result.get_month("January 2024").transactions[0].type == "Zelle Transfer"
    assert_consistent(result)


def test_configured_delay_and_chunk_size(make_pdf, scripted_extractor, recording_sleep):
    extractor = scripted_extractor([response_json(JANUARY)] * 3)
    analyzer = StatementAnalyzer(extractor, splitter=PageSplitter(max_pages=2), delay=5, sleep=recording_sleep)

    outcome = analyzer.analyze_chunked(make_pdf(5))

    assert outcome.chunks_processed == 3
    assert recording_sleep.calls == [5, 5]
    assert outcome.result.total_transactions == 1


def test_failed_chunk_is_tolerated(make_pdf, scripted_extractor, recording_sleep):
    extractor = scripted_extractor([response_json(JANUARY), TimeoutError("upstream timeout"), response_json(JANUARY)])
    outcome = StatementAnalyzer(extractor, sleep=recording_sleep).analyze_chunked(make_pdf(30))

    assert outcome.success
    assert outcome.chunks_processed == 3
    assert len(extractor.calls) == 3
    assert outcome.result.total_transactions == 1


def test_all_chunks_failing_is_reported(make_pdf, scripted_extractor, recording_sleep):
    extractor = scripted_extractor([RuntimeError("down")] * 3)
    outcome = StatementAnalyzer(extractor, sleep=recording_sleep).analyze_chunked(make_pdf(25))

    assert not outcome.success
    assert outcome.result is None
    assert outcome.chunks_processed == 3
    assert "No chunks processed successfully" in outcome.error


def test_unreadable_pdf_fails_before_any_submission(scripted_extractor, recording_sleep):
    extractor = scripted_extractor([])
    document = Document(data=b"garbage", media_type="application/pdf", name="broken.pdf")

    outcome = StatementAnalyzer(extractor, sleep=recording_sleep).analyze_chunked(document)

    assert not outcome.success
    assert outcome.chunks_processed == 0
    assert extractor.calls == []


def test_single_chunk_with_invalid_json_fails(make_pdf, scripted_extractor, recording_sleep):
    extractor = scripted_extractor(["I could not read this statement."])
    outcome = StatementAnalyzer(extractor, sleep=recording_sleep).analyze_chunked(make_pdf(3))

    assert not outcome.success
    assert "Chunk 1 failed" in outcome.error


def test_response_without_months_is_an_empty_success(make_pdf, scripted_extractor, recording_sleep):
    extractor = scripted_extractor(['{"accountNumber": "1514"}'])
    outcome = StatementAnalyzer(extractor, sleep=recording_sleep).analyze_chunked(make_pdf(2))

    assert outcome.success
    assert outcome.result.months == []
    assert outcome.result.total_income == 0.0
    assert outcome.result.account_number == "1514"


def test_fenced_response_is_accepted(make_pdf, scripted_extractor, recording_sleep):
    extractor = scripted_extractor([f"```json\n{response_json(JANUARY)}\n```"])
    outcome = StatementAnalyzer(extractor, sleep=recording_sleep).analyze_chunked(make_pdf(2))
    assert outcome.success
    assert outcome.result.total_transactions == 1


def test_direct_analysis_never_splits(make_pdf, scripted_extractor, recording_sleep):
    extractor = scripted_extractor([response_json(JANUARY)])
    document = make_pdf(25)

    outcome = StatementAnalyzer(extractor, sleep=recording_sleep).analyze(document)

    assert outcome.success
    assert outcome.chunks_processed == 1
    assert extractor.calls == [(document, DIRECT_INSTRUCTION)]
    assert recording_sleep.calls == []


def test_images_are_sent_whole(scripted_extractor, recording_sleep):
    extractor = scripted_extractor([response_json(JANUARY)])
    document = Document(data=b"\xff\xd8 fake jpeg", media_type="image/jpeg", name="scan.jpg")

    outcome = StatementAnalyzer(extractor, sleep=recording_sleep).analyze_chunked(document)

    assert outcome.success
    assert extractor.calls[0][0] is document
