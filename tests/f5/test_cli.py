"""Tests for the tagdrill CLI commands."""

import json

from typer.testing import CliRunner

from tagdrill.cli.commands import app
from tagdrill.core.proficiency import DEFAULT_NAMESPACE

runner = CliRunner()


def _state(data_dir):
    path = data_dir / "state" / f"{DEFAULT_NAMESPACE}.json"
    return json.loads(path.read_text(encoding="utf-8"))


class TestQuizCommand:
    """Tests for the interactive quiz."""

    def test_quiz_all_known(self, sample_data_dir, cli_env):
        """Answering `1` for every item scores everything correct."""
        result = runner.invoke(
            app,
            ["quiz", "-c", "设备", "--pause", "0"],
            input="1\n1\n",
            env=cli_env,
        )

        assert result.exit_code == 0, result.output
        assert "练习完成" in result.output
        assert "2/2" in result.output
        state = _state(sample_data_dir)
        assert state["设备|P101"] == {"correct": 1, "wrong": 0, "level": 1}
        assert state["设备|V201"]["level"] == 1

    def test_quiz_wrong_answers(self, sample_data_dir, cli_env):
        result = runner.invoke(
            app,
            ["quiz", "-c", "equipment", "--pause", "0"],
            input="nonsense\nnonsense\n",
            env=cli_env,
        )

        assert result.exit_code == 0, result.output
        assert "错误" in result.output
        assert "0/2" in result.output
        assert _state(sample_data_dir)["设备|P101"]["wrong"] == 1

    def test_quiz_typed_answer(self, sample_data_dir, cli_env):
        """A full performance answer is graded field by field."""
        result = runner.invoke(
            app,
            ["quiz", "-c", "性能参数", "--pause", "0"],
            input="Pump A\nwater\n10 kW\n120-250\n",
            env=cli_env,
        )

        assert result.exit_code == 0, result.output
        assert "1/1" in result.output
        assert _state(sample_data_dir)["性能参数|P101"]["correct"] == 1

    def test_quiz_limit(self, sample_data_dir, cli_env):
        result = runner.invoke(
            app,
            ["quiz", "-c", "mixed", "-n", "1", "--pause", "0"],
            input="1\n",
            env=cli_env,
        )

        assert result.exit_code == 0, result.output
        assert "1/1" in result.output
        assert len(_state(sample_data_dir)) == 1

    def test_quiz_exam_mode(self, sample_data_dir, cli_env):
        """Exam mode asks one item from each category of the sample."""
        result = runner.invoke(
            app,
            ["quiz", "-c", "混合", "--exam", "--pause", "0"],
            input="1\n1\n1\n1\n",
            env=cli_env,
        )

        assert result.exit_code == 0, result.output
        assert "4/4" in result.output

    def test_quiz_without_data(self, tmp_path):
        result = runner.invoke(
            app,
            ["quiz", "--pause", "0"],
            env={"TAGDRILL_DATA_DIR": str(tmp_path / "empty")},
        )

        assert result.exit_code == 1
        assert "请先导入 CSV 数据" in result.output

    def test_quiz_unknown_category(self, cli_env):
        result = runner.invoke(app, ["quiz", "-c", "xyz"], env=cli_env)

        assert result.exit_code == 1
        assert "未找到类别" in result.output
        assert "阀门" in result.output


class TestStatsCommand:
    def test_stats_empty(self, cli_env):
        result = runner.invoke(app, ["stats"], env=cli_env)
        assert result.exit_code == 0
        assert "暂无数据" in result.output

    def test_stats_after_quiz(self, cli_env):
        runner.invoke(
            app, ["quiz", "-c", "设备", "--pause", "0"], input="1\n2\n", env=cli_env
        )
        result = runner.invoke(app, ["stats"], env=cli_env)

        assert result.exit_code == 0, result.output
        assert "熟练度" in result.output
        assert "50%" in result.output


class TestWrongbookCommand:
    def test_wrongbook_empty(self, cli_env):
        result = runner.invoke(app, ["wrongbook"], env=cli_env)
        assert result.exit_code == 0
        assert "暂无记录" in result.output

    def test_wrongbook_lists_names(self, cli_env):
        runner.invoke(
            app, ["quiz", "-c", "设备", "--pause", "0"], input="2\n2\n", env=cli_env
        )
        result = runner.invoke(app, ["wrongbook"], env=cli_env)

        assert result.exit_code == 0, result.output
        assert "P101" in result.output
        assert "离心泵" in result.output
        assert "V201" in result.output


class TestDatasetsCommand:
    def test_counts(self, cli_env):
        result = runner.invoke(app, ["datasets"], env=cli_env)
        assert result.exit_code == 0, result.output
        assert "设备: 2" in result.output
        assert "性能参数: 1" in result.output

    def test_empty_data_dir(self, tmp_path):
        result = runner.invoke(
            app, ["datasets"], env={"TAGDRILL_DATA_DIR": str(tmp_path)}
        )
        assert result.exit_code == 1
        assert "缺失" in result.output


class TestResetCommand:
    def test_reset_force(self, sample_data_dir, cli_env):
        runner.invoke(
            app, ["quiz", "-c", "设备", "--pause", "0"], input="1\n1\n", env=cli_env
        )
        result = runner.invoke(app, ["reset", "--force"], env=cli_env)

        assert result.exit_code == 0, result.output
        assert "已清除 2 条记录" in result.output
        assert _state(sample_data_dir) == {}

    def test_reset_cancelled(self, sample_data_dir, cli_env):
        runner.invoke(
            app, ["quiz", "-c", "设备", "--pause", "0"], input="1\n1\n", env=cli_env
        )
        result = runner.invoke(app, ["reset"], input="n\n", env=cli_env)

        assert result.exit_code == 0
        assert "已取消" in result.output
        assert len(_state(sample_data_dir)) == 2
