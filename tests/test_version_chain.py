"""Tests for VersionChainManager — position allocation and chain linking.

Covers first appends, explicit and implicit predecessor linking, conflicts
that must leave no partial writes, retry behaviour under contention, and
concurrent appends from threads with their own sessions.
"""

import threading
from unittest.mock import patch

import pytest
from sqlalchemy.orm.exc import StaleDataError

from cvtrail.database import SessionLocal
from cvtrail.exceptions import (
    ChainConflictError,
    DocumentNotFoundError,
    TransientStoreError,
)
from cvtrail.models import Analysis, Document
from cvtrail.repositories import DocumentRepository
from cvtrail.services.version_chain import VersionChainManager

MODEL = "test/model"


def _content(n):
    return {"kind": "structured", "summary": f"analysis {n}"}


def _reload(db, document_id):
    db.expire_all()
    return db.get(Document, document_id)


def _heads(db, document_id):
    """Analyses of a document whose forward pointer is still null."""
    db.expire_all()
    return db.query(Analysis).filter(
        Analysis.document_id == document_id,
        Analysis.next_analysis_id.is_(None),
    ).order_by(Analysis.position.asc()).all()


class TestAppend:

    def test_first_analysis(self, db, make_document):
        doc = make_document()
        manager = VersionChainManager(db)

        analysis_id = manager.append_analysis(doc.id, _content(1), MODEL)

        assert analysis_id == f"{doc.id}-1"
        doc = _reload(db, doc.id)
        assert doc.analysis_count == 1
        assert doc.head_analysis_id == analysis_id
        assert doc.version_index == {"1": analysis_id}

        analysis = manager.get_analysis(analysis_id)
        assert analysis.position == 1
        assert analysis.owner == "user-1"
        assert analysis.model_identifier == MODEL
        assert analysis.next_analysis_id is None
        assert analysis.content["summary"] == "analysis 1"

    def test_explicit_predecessor_is_linked(self, db, make_document):
        doc = make_document()
        manager = VersionChainManager(db)
        first = manager.append_analysis(doc.id, _content(1), MODEL)

        second = manager.append_analysis(doc.id, _content(2), MODEL, predecessor_analysis_id=first)

        assert second == f"{doc.id}-2"
        assert manager.get_analysis(first).next_analysis_id == second
        assert manager.get_analysis(second).next_analysis_id is None
        doc = _reload(db, doc.id)
        assert doc.analysis_count == 2
        assert doc.head_analysis_id == second
        assert doc.version_index == {"1": first, "2": second}

    def test_append_without_predecessor_links_current_head(self, db, make_document):
        doc = make_document()
        manager = VersionChainManager(db)
        first = manager.append_analysis(doc.id, _content(1), MODEL)

        second = manager.append_analysis(doc.id, _content(2), MODEL)

        assert manager.get_analysis(first).next_analysis_id == second
        assert len(_heads(db, doc.id)) == 1

    def test_missing_document(self, db):
        with pytest.raises(DocumentNotFoundError) as exc_info:
            VersionChainManager(db).append_analysis("no-such-doc", _content(1), MODEL)
        assert exc_info.value.status_code == 404
        assert db.query(Analysis).count() == 0

    def test_documents_have_independent_positions(self, db, make_document):
        a = make_document(source_path="user-1/a.pdf")
        b = make_document(source_path="user-1/b.pdf")
        manager = VersionChainManager(db)

        manager.append_analysis(a.id, _content(1), MODEL)
        manager.append_analysis(a.id, _content(2), MODEL)
        b_first = manager.append_analysis(b.id, _content(1), MODEL)

        assert b_first == f"{b.id}-1"
        assert _reload(db, a.id).analysis_count == 2
        assert _reload(db, b.id).analysis_count == 1


class TestConflicts:

    def test_non_head_predecessor_writes_nothing(self, db, make_document):
        doc = make_document()
        manager = VersionChainManager(db)
        first = manager.append_analysis(doc.id, _content(1), MODEL)
        second = manager.append_analysis(doc.id, _content(2), MODEL, predecessor_analysis_id=first)

        with pytest.raises(ChainConflictError) as exc_info:
            manager.append_analysis(doc.id, _content(3), MODEL, predecessor_analysis_id=first)

        assert exc_info.value.status_code == 409
        assert exc_info.value.error_code.value == "CONFLICT"
        doc = _reload(db, doc.id)
        assert doc.analysis_count == 2
        assert doc.head_analysis_id == second
        assert db.query(Analysis).filter(Analysis.document_id == doc.id).count() == 2
        assert manager.get_analysis(first).next_analysis_id == second

    def test_missing_predecessor(self, db, make_document):
        doc = make_document()
        manager = VersionChainManager(db)

        with pytest.raises(ChainConflictError):
            manager.append_analysis(doc.id, _content(1), MODEL, predecessor_analysis_id=f"{doc.id}-7")
        assert _reload(db, doc.id).analysis_count == 0

    def test_predecessor_from_another_document(self, db, make_document):
        a = make_document(source_path="user-1/a.pdf")
        b = make_document(source_path="user-1/b.pdf")
        manager = VersionChainManager(db)
        a_first = manager.append_analysis(a.id, _content(1), MODEL)
        manager.append_analysis(b.id, _content(1), MODEL)

        with pytest.raises(ChainConflictError):
            manager.append_analysis(b.id, _content(2), MODEL, predecessor_analysis_id=a_first)

        assert _reload(db, b.id).analysis_count == 1
        assert manager.get_analysis(a_first).next_analysis_id is None


class TestChainWalk:

    def test_regenerations_form_one_chain(self, db, make_document):
        doc = make_document()
        manager = VersionChainManager(db)
        head = manager.append_analysis(doc.id, _content(1), MODEL)
        for n in range(2, 7):
            head = manager.append_analysis(doc.id, _content(n), MODEL, predecessor_analysis_id=head)

        chain = manager.get_chain(doc.id)
        assert [a.position for a in chain] == [1, 2, 3, 4, 5, 6]
        assert chain[-1].analysis_id == head
        assert [a.analysis_id for a in _heads(db, doc.id)] == [head]
        assert manager.get_head(doc.id).analysis_id == head

    def test_empty_chain(self, db, make_document):
        doc = make_document()
        manager = VersionChainManager(db)
        assert manager.get_chain(doc.id) == []
        assert manager.get_head(doc.id) is None


class TestRetries:

    def test_contention_exhausts_retries(self, db, make_document):
        doc = make_document()
        sleeps = []
        manager = VersionChainManager(db, max_attempts=3, backoff_base=0.01, backoff_max=0.05, sleep=sleeps.append)

        with patch.object(manager.doc_repo, "record_analysis", side_effect=StaleDataError("lost race")):
            with pytest.raises(TransientStoreError) as exc_info:
                manager.append_analysis(doc.id, _content(1), MODEL)

        assert exc_info.value.status_code == 503
        assert exc_info.value.details["attempts"] == 3
        assert len(sleeps) == 2
        assert all(0 < s <= 0.05 for s in sleeps)
        assert db.query(Analysis).count() == 0
        assert _reload(db, doc.id).analysis_count == 0

    def test_contention_then_success(self, db, make_document):
        doc = make_document()
        sleeps = []
        manager = VersionChainManager(db, max_attempts=3, sleep=sleeps.append)
        original = DocumentRepository.record_analysis
        calls = {"n": 0}

        def flaky(document, position, analysis_id):
            calls["n"] += 1
            if calls["n"] == 1:
                raise StaleDataError("lost race")
            return original(manager.doc_repo, document, position, analysis_id)

        with patch.object(manager.doc_repo, "record_analysis", side_effect=flaky):
            analysis_id = manager.append_analysis(doc.id, _content(1), MODEL)

        assert analysis_id == f"{doc.id}-1"
        assert len(sleeps) == 1
        assert db.query(Analysis).count() == 1

    def test_concurrent_writer_is_detected(self, db, make_document):
        """A commit between our read and our write forces a retry from fresh reads."""
        doc = make_document()
        sleeps = []
        manager = VersionChainManager(db, max_attempts=3, sleep=sleeps.append)
        original = DocumentRepository.record_analysis
        calls = {"n": 0}

        def interleaved(document, position, analysis_id):
            calls["n"] += 1
            if calls["n"] == 1:
                other = SessionLocal()
                try:
                    VersionChainManager(other).append_analysis(doc.id, _content("other"), MODEL)
                finally:
                    other.close()
            return original(manager.doc_repo, document, position, analysis_id)

        with patch.object(manager.doc_repo, "record_analysis", side_effect=interleaved):
            analysis_id = manager.append_analysis(doc.id, _content("ours"), MODEL)

        assert analysis_id == f"{doc.id}-2"
        assert len(sleeps) == 1
        chain = manager.get_chain(doc.id)
        assert [a.content["summary"] for a in chain] == ["analysis other", "analysis ours"]

    def test_other_errors_are_not_retried(self, db, make_document):
        doc = make_document()
        sleeps = []
        manager = VersionChainManager(db, max_attempts=5, sleep=sleeps.append)

        with patch.object(manager.doc_repo, "record_analysis", side_effect=RuntimeError("bug")):
            with pytest.raises(RuntimeError):
                manager.append_analysis(doc.id, _content(1), MODEL)

        assert sleeps == []
        assert db.query(Analysis).count() == 0


class TestConcurrency:

    def test_concurrent_appends_lose_no_positions(self, db, make_document):
        doc = make_document()
        workers = 8
        barrier = threading.Barrier(workers)
        results, errors = [], []
        lock = threading.Lock()

        def append(n):
            session = SessionLocal()
            try:
                manager = VersionChainManager(session, max_attempts=200, backoff_base=0.001, backoff_max=0.02)
                barrier.wait()
                analysis_id = manager.append_analysis(doc.id, _content(n), MODEL)
                with lock:
                    results.append(analysis_id)
            except Exception as e:  # collected and asserted below
                with lock:
                    errors.append(e)
            finally:
                session.close()

        threads = [threading.Thread(target=append, args=(n,)) for n in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=60)

        assert errors == []
        assert sorted(results) == sorted(f"{doc.id}-{p}" for p in range(1, workers + 1))

        doc = _reload(db, doc.id)
        assert doc.analysis_count == workers
        assert sorted(int(k) for k in doc.version_index) == list(range(1, workers + 1))

        chain = VersionChainManager(db).get_chain(doc.id)
        assert [a.position for a in chain] == list(range(1, workers + 1))
        assert len(_heads(db, doc.id)) == 1


class TestFeedback:

    def test_feedback_leaves_chain_untouched(self, db, make_document):
        doc = make_document()
        manager = VersionChainManager(db)
        analysis_id = manager.append_analysis(doc.id, _content(1), MODEL)

        analysis = manager.record_feedback(analysis_id, 4, "Helpful")

        assert analysis.user_rating == 4
        assert analysis.user_comment == "Helpful"
        assert analysis.next_analysis_id is None
        assert _reload(db, doc.id).analysis_count == 1
