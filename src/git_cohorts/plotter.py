"""Render cohort histograms to PNG with gnuplot.

The histogram is embedded in the generated script as an inline data block
(``$data << EOD``) in the ``|``-separated export format. Columns are drawn
as row-stacked bars, the Sum column as a step line on top, and project
markers as boxed labels.
"""

from __future__ import annotations

import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from .exceptions import EmptyHistogramError, ErrorCode, RenderError
from .histogram import CohortHistogram
from .logging_config import get_logger
from .meta import Marker, ProjectMeta
from .models import IntervalType

logger = get_logger(__name__)

# Two greys for the oldest cohorts, then paired qualitative colours
_PALETTE = [
    "#909090", "#505050", "#a6cee3", "#1f78b4", "#c2a5cf", "#9970ab",
    "#b2df8a", "#33a02c", "#fb9a99", "#e31a1c", "#fdbf6f", "#ff7f00",
    "#6b3d15", "#bf812d", "#458e81", "#34c0b5", "#40004b", "#762a83",
    "#00441b", "#1b7837", "#a50026", "#d73027", "#053061", "#2166ac",
]

# Colour of the trailing Brief column
_BRIEF_COLOUR = "#ffffd0"

_COMMON = """
set terminal pngcairo size 2560,1200 enhanced background rgb 'white' font 'Verdana,25';
set datafile separator '|';
set rmargin 1.1;
set tmargin 0.6;
set bmargin 7.0;
set border 3;
set decimalsign locale;
set decimalsign ',';
set format y "%'.0f";
set border lw 2;
set style fill solid;
set style line 101 lc rgb "0x50000000" dashtype '-' lw 2;
set yrange [] writeback;
set style data histogram;
set style histogram rowstacked;
set xtics scale 0 nomirror offset 0,graph 0.015;
set ytics nomirror;
set key autotitle columnheader;
set key reverse Left horizontal nobox bmargin left width 1.1;
set ytics textcolor rgb "0xff000000" scale 0;
"""


def _line_styles(n_columns: int) -> str:
    lines = []
    for i in range(1, n_columns + 1):
        colour = _PALETTE[(i - 1) % len(_PALETTE)]
        lines.append(f"set style line {i} lt 1 lc rgb '{colour}';")
    return "\n".join(lines)


def _markers_array(markers: list[Marker]) -> str:
    if not markers:
        return ""
    entries = []
    for m in markers:
        month = -1 if m.time.month is None else m.time.month
        text = m.text.replace("'", "''")
        entries.append(f"'{m.time.year}', '{month:02d}', {m.row}, '{text}'")
    return "array markers = [ " + ", ".join(entries) + " ];"


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class Plotter:
    """Build gnuplot scripts for cohort histograms and run gnuplot."""

    def __init__(self, gnuplot: str = "gnuplot", timeout: Optional[float] = None):
        self.gnuplot = gnuplot
        self.timeout = timeout

    def year_range(
        self,
        meta: ProjectMeta,
        hist: CohortHistogram,
        interval: IntervalType,
        first_year: Optional[int] = None,
        last_year: Optional[int] = None,
    ) -> tuple[int, int]:
        """Plotted years: explicit arguments, then metadata, then histogram bounds.

        Yearly plots spanning several years leave out the last year, which
        is usually incomplete.
        """
        bounds = hist.bounds()
        if bounds is None:
            raise EmptyHistogramError()

        first = first_year if first_year is not None else meta.first_year
        if first is None:
            first = bounds.min_bin.year

        last = last_year if last_year is not None else meta.last_year
        if last is None:
            last = bounds.max_bin.year
            if interval is IntervalType.YEAR and bounds.min_bin.year != bounds.max_bin.year:
                last -= 1
        return first, last

    def build_script(
        self,
        meta: ProjectMeta,
        unit_label: str,
        hist: CohortHistogram,
        out_path: Path,
        interval: IntervalType,
        first_year: Optional[int] = None,
        last_year: Optional[int] = None,
    ) -> str:
        bounds = hist.bounds()
        if bounds is None:
            raise EmptyHistogramError()

        first, last = self.year_range(meta, hist, interval, first_year, last_year)
        origin = bounds.min_bin.year
        n_columns = hist.n_cohorts + (1 if hist.has_named_sentinel else 0)
        markers = _markers_array(meta.markers)

        if interval is IntervalType.MONTH:
            # Year|Month|Sum|cohorts...
            first_col, sum_col = 4, 3
            xrange = f"[{(first - origin) * 12 - 0.5}:{(last - origin) * 12 + 11.5}]"
            plot_bars = (
                f"plot for [i={first_col}:{first_col + n_columns - 1}] '$data' "
                f"using i:xtic($2==6 ? stringcolumn(1) : \"\") ls i-{first_col - 1} "
                "title columnheader(i);"
            )
            xtics = "set xtics scale 1 11.5,12 textcolor rgb \"0xff000000\";"
            marker_x = f"((markers[int(i)*4+1]-{origin})*12+(markers[int(i)*4+2]))-2.5"
        else:
            # Year|Sum|cohorts...
            first_col, sum_col = 3, 2
            xrange = f"[{first - origin - 0.5}:{last - origin + 0.5}]"
            plot_bars = (
                f"plot for [i={first_col}:{first_col + n_columns - 1}] '$data' "
                f"using i:xtic(stringcolumn(1)) ls i-{first_col - 1} "
                "title columnheader(i);"
            )
            xtics = "set xtics textcolor rgb \"0xff000000\" scale 1 0.5,1;"
            marker_x = (
                f"((markers[int(i)*4+1]-{origin})*12+(markers[int(i)*4+2]-1))/12.0-(1.1/2.0)"
            )

        marker_labels = ""
        if meta.markers:
            marker_labels = (
                f"set for [i=0:{len(meta.markers) - 1}:1] label left markers[int(i)*4+4] "
                f"at {marker_x}, (0.977-0.05*markers[int(i)*4+3])*GPVAL_Y_MAX "
                "front tc ls 0 boxed;"
            )

        brief_style = ""
        if hist.has_named_sentinel:
            brief_style = f"set style line {n_columns} lt 1 lc rgb '{_BRIEF_COLOUR}';"

        return "\n".join(
            [
                _COMMON,
                _line_styles(n_columns),
                brief_style,
                "$data << EOD",
                hist.to_table(),
                "EOD",
                f'set output "{_quote(str(out_path))}";',
                f'set ylabel "{_quote(unit_label)}";',
                f"set xrange {xrange};",
                "set multiplot;",
                plot_bars,
                "unset key;",
                "set style data histep;",
                xtics,
                'set ytics textcolor rgb "0x00000000" scale default;',
                "set grid xtics ytics front linestyle 101;",
                "set yrange restore;",
                "set style textbox opaque noborder;",
                markers,
                marker_labels,
                f"plot '$data' using {sum_col} lc rgb 'black' lw 2 notitle;",
                "unset multiplot;",
                "",
            ]
        )

    def plot(
        self,
        meta: ProjectMeta,
        unit_label: str,
        hist: CohortHistogram,
        out_path: Path,
        interval: IntervalType,
        first_year: Optional[int] = None,
        last_year: Optional[int] = None,
    ) -> None:
        """Write the script to a temporary file and run gnuplot on it."""
        script = self.build_script(
            meta, unit_label, hist, out_path, interval, first_year, last_year
        )

        with tempfile.NamedTemporaryFile("w", suffix=".gp", delete=False) as f:
            f.write(script)
            script_path = Path(f.name)

        try:
            logger.debug("Running %s %s", self.gnuplot, script_path)
            result = subprocess.run(
                [self.gnuplot, str(script_path)],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise RenderError(
                message=f"{self.gnuplot} not found",
                code=ErrorCode.GC400,
                recoverable=False,
                recovery_hint="Install gnuplot with the pngcairo terminal",
            ) from e
        except subprocess.TimeoutExpired as e:
            raise RenderError(
                message=f"gnuplot did not finish within {self.timeout} seconds",
                code=ErrorCode.GC401,
                context={"timeout": self.timeout},
            ) from e
        finally:
            script_path.unlink(missing_ok=True)

        if result.returncode != 0:
            raise RenderError(
                message="gnuplot reported an error",
                code=ErrorCode.GC401,
                context={"stderr": result.stderr.strip()},
            )
        logger.info("Wrote %s", out_path)
