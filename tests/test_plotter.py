"""Tests for gnuplot script generation."""

import os
from pathlib import Path

import pytest

from git_cohorts.exceptions import EmptyHistogramError, ErrorCode, RenderError
from git_cohorts.histogram import NO_COHORT, CohortHistogram, TimeBin
from git_cohorts.meta import Marker, ProjectMeta
from git_cohorts.models import IntervalType
from git_cohorts.plotter import Plotter


@pytest.fixture
def yearly_hist():
    hist = CohortHistogram()
    for year, value in ((2019, 1), (2020, 3), (2021, 2)):
        hist.set(TimeBin(year), 2019, value)
    hist.set(TimeBin(2020), NO_COHORT, 1)
    hist.set_name(2019, "2019")
    hist.set_name(NO_COHORT, "Brief")
    return hist


@pytest.fixture
def monthly_hist():
    hist = CohortHistogram()
    hist.set(TimeBin(2020, 3), 2020, 4)
    hist.set_name(2020, "2020")
    return hist


class TestYearRange:
    def test_yearly_drops_last_partial_year(self, yearly_hist):
        assert Plotter().year_range(ProjectMeta(), yearly_hist, IntervalType.YEAR) == (2019, 2020)

    def test_monthly_keeps_last_year(self, monthly_hist):
        assert Plotter().year_range(ProjectMeta(), monthly_hist, IntervalType.MONTH) == (2020, 2020)

    def test_metadata_then_arguments(self, yearly_hist):
        meta = ProjectMeta(first_year=2020, last_year=2021)
        plotter = Plotter()
        assert plotter.year_range(meta, yearly_hist, IntervalType.YEAR) == (2020, 2021)
        assert plotter.year_range(meta, yearly_hist, IntervalType.YEAR, 2019, 2019) == (2019, 2019)


class TestBuildScript:
    """Test the generated gnuplot script."""

    def test_embeds_table(self, yearly_hist):
        script = Plotter().build_script(
            ProjectMeta(), "Authors", yearly_hist, Path("out.png"), IntervalType.YEAR
        )
        assert "$data << EOD\n" + yearly_hist.to_table() + "\nEOD" in script
        assert 'set output "out.png";' in script
        assert 'set ylabel "Authors";' in script

    def test_yearly_layout(self, yearly_hist):
        script = Plotter().build_script(
            ProjectMeta(), "Authors", yearly_hist, Path("out.png"), IntervalType.YEAR
        )
        assert "set xrange [-0.5:1.5];" in script
        # one cohort column plus Brief, starting after Year|Sum
        assert "plot for [i=3:4]" in script
        assert "plot '$data' using 2 " in script
        assert "set style line 2 lt 1 lc rgb '#ffffd0';" in script

    def test_monthly_layout(self, monthly_hist):
        script = Plotter().build_script(
            ProjectMeta(), "Commits", monthly_hist, Path("m.png"), IntervalType.MONTH
        )
        assert "set xrange [-0.5:11.5];" in script
        assert "plot for [i=4:4]" in script
        assert "plot '$data' using 3 " in script

    def test_markers(self, yearly_hist):
        meta = ProjectMeta(markers=[Marker(TimeBin(2020, 2), 1, "GNOME's 3.0")])
        script = Plotter().build_script(
            meta, "Authors", yearly_hist, Path("out.png"), IntervalType.YEAR
        )
        assert "array markers = [ '2020', '02', 1, 'GNOME''s 3.0' ];" in script
        assert "set for [i=0:0:1] label left markers[int(i)*4+4]" in script

    def test_empty_histogram(self):
        with pytest.raises(EmptyHistogramError):
            Plotter().build_script(
                ProjectMeta(), "Authors", CohortHistogram(), Path("out.png"), IntervalType.YEAR
            )


class TestPlot:
    def test_missing_gnuplot(self, yearly_hist, tmp_path):
        plotter = Plotter(gnuplot=str(tmp_path / "no-such-gnuplot"))
        with pytest.raises(RenderError) as exc_info:
            plotter.plot(ProjectMeta(), "Authors", yearly_hist, tmp_path / "o.png", IntervalType.YEAR)
        assert exc_info.value.code == ErrorCode.GC400


def _fake_gnuplot(tmp_path: Path, body: str) -> str:
    path = tmp_path / "gnuplot"
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(0o755)
    return str(path)


@pytest.mark.skipif(os.name != "posix", reason="needs a shell script as gnuplot")
class TestPlotProcess:
    def test_gnuplot_failure(self, yearly_hist, tmp_path):
        plotter = Plotter(gnuplot=_fake_gnuplot(tmp_path, "echo 'bad terminal' >&2; exit 1"))
        with pytest.raises(RenderError) as exc_info:
            plotter.plot(ProjectMeta(), "Authors", yearly_hist, tmp_path / "o.png", IntervalType.YEAR)
        assert exc_info.value.code == ErrorCode.GC401
        assert exc_info.value.context["stderr"] == "bad terminal"

    def test_gnuplot_timeout(self, yearly_hist, tmp_path):
        plotter = Plotter(gnuplot=_fake_gnuplot(tmp_path, "exec sleep 10"), timeout=0.2)
        with pytest.raises(RenderError) as exc_info:
            plotter.plot(ProjectMeta(), "Authors", yearly_hist, tmp_path / "o.png", IntervalType.YEAR)
        assert exc_info.value.code == ErrorCode.GC401
        assert "did not finish" in str(exc_info.value)

    def test_runs_generated_script(self, yearly_hist, tmp_path):
        seen = tmp_path / "seen.gp"
        plotter = Plotter(gnuplot=_fake_gnuplot(tmp_path, f'cp "$1" "{seen}"'))
        plotter.plot(ProjectMeta(), "Authors", yearly_hist, tmp_path / "o.png", IntervalType.YEAR)
        assert "$data << EOD" in seen.read_text()
