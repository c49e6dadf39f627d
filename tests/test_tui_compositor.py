#
# BeatWave
# Copyright (c) 2025 Martynas Jocius
#
import unittest
from unittest import mock

from rich.panel import Panel
from rich.text import Text

from beatwave.core.waves import BLANK_CELL, LINE_GLYPH, Area, WaveCell, WaveStyle
from beatwave.ui.tui import build_wave_panel, compose_frame, compose_lines, render
from beatwave.utils.colors import ColorScheme


class ComposeTests(unittest.TestCase):
    def test_lines_carry_one_span_per_cell(self):
        frame = [[WaveCell(LINE_GLYPH, (1, 2, 3)), BLANK_CELL], [BLANK_CELL, WaveCell("●", (9, 8, 7))]]
        lines = compose_lines(frame)

        self.assertEqual([line.plain for line in lines], [LINE_GLYPH + " ", " ●"])
        self.assertEqual([str(span.style) for span in lines[0].spans], ["rgb(1,2,3)", "rgb(0,0,0)"])
        self.assertEqual(str(lines[1].spans[1].style), "rgb(9,8,7)")

    def test_lines_never_wrap(self):
        line = compose_lines([[BLANK_CELL] * 5])[0]
        self.assertTrue(line.no_wrap)
        self.assertEqual(line.overflow, "crop")

    def test_compose_frame_joins_rows(self):
        frame = [[WaveCell("a", (0, 0, 0))], [WaveCell("b", (0, 0, 0))]]
        self.assertEqual(compose_frame(frame).plain, "a\nb")
        self.assertEqual(compose_frame([]).plain, "")


class WavePanelTests(unittest.TestCase):
    def test_bordered_panel_has_title(self):
        panel = build_wave_panel([[BLANK_CELL]], show_border=True, title="Concentric Waves")
        self.assertIsInstance(panel, Panel)
        self.assertEqual(panel.title, "Concentric Waves")

    def test_borderless_panel_is_plain_text(self):
        content = build_wave_panel([[BLANK_CELL]], show_border=False)
        self.assertIsInstance(content, Text)


class RenderTests(unittest.TestCase):
    def test_border_shrinks_wave_area(self):
        target = mock.Mock()
        frame = render(target, Area(0, 3, 22, 12), 0.0)

        self.assertEqual(len(frame), 10)
        self.assertTrue(all(len(row) == 20 for row in frame))
        target.update.assert_called_once()
        panel = target.update.call_args[0][0]
        self.assertIsInstance(panel, Panel)
        self.assertEqual(panel.title, "Visualization")

    def test_borderless_uses_full_area(self):
        target = mock.Mock()
        frame = render(target, Area(0, 0, 22, 12), 0.0, show_border=False)

        self.assertEqual(len(frame), 12)
        self.assertTrue(all(len(row) == 22 for row in frame))
        self.assertIsInstance(target.update.call_args[0][0], Text)

    def test_radial_style_titles_panel(self):
        target = mock.Mock()
        render(target, Area(0, 0, 30, 12), 0.5, scheme=ColorScheme.OCEAN, style=WaveStyle.RADIAL)
        self.assertEqual(target.update.call_args[0][0].title, "Concentric Waves")

    def test_tiny_area_renders_empty_frame(self):
        target = mock.Mock()
        frame = render(target, Area(0, 0, 2, 2), 0.3)
        self.assertEqual(frame, [])
        target.update.assert_called_once()


if __name__ == "__main__":
    unittest.main()
