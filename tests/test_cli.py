"""CLI tests for loading, checking, searching and asking."""

import json
from pathlib import Path

import embeddings_lab.main as main_module
from embeddings_lab.composer import AnswerComposer
from embeddings_lab.storage import DuckDBVectorStore
from typer.testing import CliRunner

from conftest import FakeChatClient, fake_provider_factory


def _recipes_db(tmp_path: Path) -> str:
    db_path = str(tmp_path / "recipes.duckdb")
    store = DuckDBVectorStore(db_path, collection="recipes", dimension=3)
    store.insert_many(
        [
            ("Chicken Noodle Soup", [0.9, 0.1, 0.0]),
            ("Veggie Stir Fry", [0.0, 1.0, 0.0]),
        ]
    )
    store.close()
    return db_path


def test_setup_creates_collection(tmp_path: Path) -> None:
    db_path = str(tmp_path / "lab.duckdb")
    runner = CliRunner()

    result = runner.invoke(
        main_module.app,
        ["setup", "--collection", "recipes", "--db-path", db_path, "--dim", "3"],
    )

    assert result.exit_code == 0
    assert "Database setup complete!" in result.stdout
    store = DuckDBVectorStore(
        db_path, collection="recipes", dimension=3, read_only=True, initialize=False
    )
    assert store.stored_dimension() == 3
    store.close()


def test_load_recipes_embeds_titles(tmp_path: Path, monkeypatch) -> None:
    recipes_file = tmp_path / "recipes.json"
    recipes_file.write_text(
        json.dumps([{"title": "Chicken Noodle Soup"}, {"calories": 500}]),
        encoding="utf-8",
    )
    titles_out = tmp_path / "titles.json"
    db_path = str(tmp_path / "lab.duckdb")
    monkeypatch.setattr(main_module, "EmbeddingProvider", fake_provider_factory())
    runner = CliRunner()

    result = runner.invoke(
        main_module.app,
        [
            "load-recipes",
            str(recipes_file),
            "--db-path",
            db_path,
            "--dim",
            "3",
            "--titles-out",
            str(titles_out),
        ],
    )

    assert result.exit_code == 0
    assert "Load Complete" in result.stdout
    assert json.loads(titles_out.read_text()) == ["Chicken Noodle Soup", "Untitled Recipe"]

    check = runner.invoke(
        main_module.app, ["check", "--db-path", db_path, "--dim", "3"]
    )
    assert check.exit_code == 0
    assert "Found 2 records in recipes" in check.stdout


def test_load_activities_infers_dimension(tmp_path: Path) -> None:
    samples_file = tmp_path / "samples.json"
    samples_file.write_text(
        json.dumps(
            [
                {"activity": "ski trip", "embedding": [1.0, 0.0, 0.0, 0.0]},
                {"activity": "beach trip", "embedding": [0.0, 1.0, 0.0, 0.0]},
            ]
        ),
        encoding="utf-8",
    )
    db_path = str(tmp_path / "lab.duckdb")

    result = CliRunner().invoke(
        main_module.app, ["load-activities", str(samples_file), "--db-path", db_path]
    )

    assert result.exit_code == 0
    store = DuckDBVectorStore(
        db_path, collection="travel_activity", dimension=4, read_only=True, initialize=False
    )
    assert store.count() == 2
    store.close()


def test_check_missing_collection_fails(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        main_module.app,
        ["check", "--db-path", str(tmp_path / "empty.duckdb"), "--dim", "3"],
    )

    assert result.exit_code == 1
    assert "does not exist" in result.stdout


def test_search_ranks_collection(lab_db: str, monkeypatch) -> None:
    monkeypatch.setattr(
        main_module, "EmbeddingProvider", fake_provider_factory({"skiing": [1.0, 0.0, 0.0]})
    )

    result = CliRunner().invoke(
        main_module.app,
        ["search", "skiing", "-c", "travel_activity", "--db-path", lab_db, "--dim", "3", "-k", "2"],
    )

    assert result.exit_code == 0
    assert "ski trip" in result.stdout
    assert "snow hike" in result.stdout
    assert "beach trip" not in result.stdout


def test_search_with_threshold_and_winter(lab_db: str, monkeypatch) -> None:
    monkeypatch.setattr(
        main_module, "EmbeddingProvider", fake_provider_factory({"sun": [0.0, 1.0, 0.0]})
    )
    runner = CliRunner()
    common = ["-c", "travel_activity", "--db-path", lab_db, "--dim", "3"]

    above = runner.invoke(main_module.app, ["search", "sun", *common, "-t", "0.5"])
    assert above.exit_code == 0
    assert "beach trip" in above.stdout
    assert "ski trip" not in above.stdout

    winter = runner.invoke(main_module.app, ["search", "sun", *common, "--winter"])
    assert winter.exit_code == 0
    assert "snow hike" in winter.stdout
    assert "beach trip" not in winter.stdout

    both = runner.invoke(
        main_module.app, ["search", "sun", *common, "--winter", "-t", "0.5"]
    )
    assert both.exit_code == 1


def test_search_dimension_mismatch_fails(lab_db: str, monkeypatch) -> None:
    monkeypatch.setattr(
        main_module, "EmbeddingProvider", fake_provider_factory({"sun": [0.0, 1.0]})
    )

    result = CliRunner().invoke(
        main_module.app,
        ["search", "sun", "-c", "travel_activity", "--db-path", lab_db, "--dim", "3"],
    )

    assert result.exit_code == 1
    assert "Error" in result.stdout


def test_similar_averages_references(lab_db: str) -> None:
    result = CliRunner().invoke(
        main_module.app,
        [
            "similar",
            "-r",
            "ski trip",
            "-r",
            "beach trip",
            "--db-path",
            lab_db,
            "--dim",
            "3",
        ],
    )

    assert result.exit_code == 0
    rows = result.stdout[result.stdout.index("similarity") :]
    assert rows.index("snow hike") < rows.index("ski trip") < rows.index("beach trip")


def test_similar_unknown_reference_fails(lab_db: str) -> None:
    result = CliRunner().invoke(
        main_module.app,
        ["similar", "-r", "moon walk", "--db-path", lab_db, "--dim", "3"],
    )

    assert result.exit_code == 1
    assert "moon walk" in result.stdout


def test_ask_answers_questions(tmp_path: Path, monkeypatch) -> None:
    db_path = _recipes_db(tmp_path)
    chat_client = FakeChatClient("Roast the chicken.")
    monkeypatch.setattr(
        main_module,
        "EmbeddingProvider",
        fake_provider_factory({"What are some meals with chicken?": [1.0, 0.0, 0.0]}),
    )
    monkeypatch.setattr(
        main_module, "AnswerComposer", lambda: AnswerComposer(client=chat_client)
    )

    result = CliRunner().invoke(
        main_module.app,
        ["ask", "What are some meals with chicken?", "--db-path", db_path, "--dim", "3"],
    )

    assert result.exit_code == 0
    assert "Roast the chicken." in result.stdout
    assert "Chicken Noodle Soup" in chat_client.aio.models.calls[0]["contents"]
    assert "Veggie Stir Fry" not in chat_client.aio.models.calls[0]["contents"]


def test_ask_reports_failures(tmp_path: Path, monkeypatch) -> None:
    db_path = _recipes_db(tmp_path)
    monkeypatch.setattr(
        main_module, "EmbeddingProvider", fake_provider_factory({"broken": [1.0]})
    )
    monkeypatch.setattr(
        main_module, "AnswerComposer", lambda: AnswerComposer(client=FakeChatClient())
    )

    result = CliRunner().invoke(
        main_module.app, ["ask", "broken", "--db-path", db_path, "--dim", "3"]
    )

    assert result.exit_code == 1
    assert "Error" in result.stdout


class _ClosingStore(DuckDBVectorStore):
    closed: list[str] = []

    def close(self) -> None:
        type(self).closed.append(self.collection)
        super().close()


def test_ask_closes_store_on_errors(lab_db: str, tmp_path: Path, monkeypatch) -> None:
    _ClosingStore.closed = []
    monkeypatch.setattr(main_module, "DuckDBVectorStore", _ClosingStore)
    monkeypatch.setattr(main_module, "EmbeddingProvider", fake_provider_factory())
    runner = CliRunner()

    # No recipes collection in this database.
    missing = runner.invoke(main_module.app, ["ask", "q", "--db-path", lab_db, "--dim", "3"])
    assert missing.exit_code == 1
    assert "does not exist" in missing.stdout

    def no_key():
        raise ValueError("GOOGLE_API_KEY is not set")

    monkeypatch.setattr(main_module, "AnswerComposer", no_key)
    db_path = _recipes_db(tmp_path)
    no_composer = runner.invoke(
        main_module.app, ["ask", "q", "--db-path", db_path, "--dim", "3"]
    )
    assert no_composer.exit_code == 1
    assert "GOOGLE_API_KEY" in no_composer.stdout

    assert _ClosingStore.closed == ["recipes", "recipes"]
