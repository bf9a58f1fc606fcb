"""
Tests for CLI-specific functionality including batch processing.

This module tests the command-line interface functionality including:
- Polygon file detection and loading (both JSON layouts)
- Single-file triangulation with output and checks
- Batch processing (process_batch function)
- main() argument handling and exit codes
"""

import json
import unittest
import sys
import tempfile
import shutil
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from polycut.cli import (
    build_result_table,
    is_polygon_file,
    load_polygon,
    main,
    process_batch,
    triangulate_file,
)
from polycut.config import TriangulationConfig
from tests.helpers import cleanup_test_file, write_json_file

SQUARE_RINGS = [[[0, 0], [10, 0], [10, 10], [0, 10]]]
SQUARE_WITH_HOLE_RINGS = SQUARE_RINGS + [[[4, 4], [6, 4], [6, 6], [4, 6]]]
BOW_TIE_RINGS = [[[0, 0], [2, 2], [2, 0], [0, 2]]]


class TestIsPolygonFile(unittest.TestCase):
    """Test the is_polygon_file function."""

    def test_json_file(self):
        self.assertTrue(is_polygon_file(Path("shape.json")))
        self.assertTrue(is_polygon_file(Path("SHAPE.JSON")))

    def test_other_files(self):
        self.assertFalse(is_polygon_file(Path("shape.txt")))
        self.assertFalse(is_polygon_file(Path("shape")))


class TestLoadPolygon(unittest.TestCase):
    """Test reading polygon JSON files."""

    def setUp(self):
        self.path = None

    def tearDown(self):
        cleanup_test_file(self.path)

    def test_nested_rings(self):
        """Nested rings are flattened, holes become start indices."""
        self.path = write_json_file(SQUARE_WITH_HOLE_RINGS)
        polygon = load_polygon(Path(self.path))
        self.assertEqual(len(polygon.vertices), 16)
        self.assertEqual(polygon.holes, [4])
        self.assertEqual(polygon.dim, 2)

    def test_flat_object(self):
        """The flat layout is read as-is."""
        self.path = write_json_file({"vertices": [0, 0, 1, 0, 0, 1], "holes": [], "dim": 2})
        polygon = load_polygon(Path(self.path))
        self.assertEqual(polygon.vertices, [0.0, 0.0, 1.0, 0.0, 0.0, 1.0])
        self.assertEqual(polygon.holes, [])

    def test_flat_object_defaults(self):
        """holes and dim are optional in the flat layout."""
        self.path = write_json_file({"vertices": [0, 0, 1, 0, 0, 1]})
        polygon = load_polygon(Path(self.path))
        self.assertEqual(polygon.holes, [])
        self.assertEqual(polygon.dim, 2)

    def test_object_without_vertices(self):
        self.path = write_json_file({"points": [0, 0]})
        with self.assertRaises(ValueError):
            load_polygon(Path(self.path))

    def test_malformed_vertices(self):
        self.path = write_json_file({"vertices": [0, "x", 1]})
        with self.assertRaises(ValueError):
            load_polygon(Path(self.path))

    def test_wrong_top_level_type(self):
        self.path = write_json_file("not a polygon")
        with self.assertRaises(ValueError):
            load_polygon(Path(self.path))


class TestTriangulateFile(unittest.TestCase):
    """Test single-file triangulation."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_writes_output(self):
        """Triangles and deviation are written as JSON."""
        input_path = Path(write_json_file(SQUARE_WITH_HOLE_RINGS, str(self.temp_dir / "shape.json")))
        output_path = self.temp_dir / "out.json"

        summary = triangulate_file(input_path, TriangulationConfig(), output_path)

        self.assertEqual(summary['input_file'], "shape.json")
        self.assertEqual(summary['result'].triangle_count, 8)
        self.assertIsNone(summary['validation'])

        written = json.loads(output_path.read_text(encoding="utf-8"))
        self.assertEqual(written['triangles'], summary['result'].triangles)
        self.assertLess(written['deviation'], 1e-12)

    def test_check_runs_validation(self):
        """check=True attaches a ValidationResult."""
        input_path = Path(write_json_file(SQUARE_RINGS, str(self.temp_dir / "square.json")))
        summary = triangulate_file(input_path, TriangulationConfig(), check=True)
        self.assertTrue(summary['validation'].is_valid)

    def test_result_table(self):
        """The summary table has one row per file."""
        input_path = Path(write_json_file(SQUARE_RINGS, str(self.temp_dir / "square.json")))
        summary = triangulate_file(input_path, TriangulationConfig())
        table = build_result_table([summary, summary])
        self.assertEqual(table.row_count, 2)
        self.assertEqual(len(table.columns), 8)


class TestProcessBatch(unittest.TestCase):
    """Test the process_batch function."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.input_dir = self.temp_dir / "input"
        self.output_dir = self.temp_dir / "output"
        self.input_dir.mkdir()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_batch_processing(self):
        """Good files succeed, bad files are reported, other files ignored."""
        write_json_file(SQUARE_RINGS, str(self.input_dir / "a.json"))
        write_json_file(SQUARE_WITH_HOLE_RINGS, str(self.input_dir / "b.json"))
        write_json_file("nope", str(self.input_dir / "c.json"))
        (self.input_dir / "notes.txt").write_text("ignored", encoding="utf-8")

        results = process_batch(self.input_dir, TriangulationConfig(), self.output_dir)

        self.assertEqual([s['input_file'] for s in results['success']], ["a.json", "b.json"])
        self.assertEqual([f['input_file'] for f in results['failed']], ["c.json"])
        self.assertTrue((self.output_dir / "a_triangles.json").exists())
        self.assertTrue((self.output_dir / "b_triangles.json").exists())
        self.assertFalse((self.output_dir / "c_triangles.json").exists())

    def test_failed_check_counts_as_failure(self):
        """Validation errors move a file to the failed list."""
        write_json_file(BOW_TIE_RINGS, str(self.input_dir / "bowtie.json"))
        results = process_batch(self.input_dir, TriangulationConfig(), check=True)
        self.assertEqual(results['success'], [])
        self.assertEqual(len(results['failed']), 1)

    def test_empty_folder(self):
        """A folder without polygon files gives empty results."""
        results = process_batch(self.input_dir, TriangulationConfig())
        self.assertEqual(results, {'success': [], 'failed': []})


class TestMain(unittest.TestCase):
    """Test main() argument handling and exit codes."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_single_file(self):
        """A good file runs to completion and writes the output."""
        input_path = write_json_file(SQUARE_RINGS, str(self.temp_dir / "square.json"))
        output_path = self.temp_dir / "square_out.json"

        main([input_path, "--output", str(output_path), "--check", "--z-order", "on"])

        self.assertEqual(len(json.loads(output_path.read_text(encoding="utf-8"))['triangles']), 6)

    def test_missing_input(self):
        with self.assertRaises(SystemExit) as ctx:
            main([str(self.temp_dir / "missing.json")])
        self.assertEqual(ctx.exception.code, 1)

    def test_invalid_config(self):
        input_path = write_json_file(SQUARE_RINGS, str(self.temp_dir / "square.json"))
        with self.assertRaises(SystemExit) as ctx:
            main([input_path, "--hash-threshold", "-5"])
        self.assertEqual(ctx.exception.code, 1)

    def test_invalid_json(self):
        input_path = self.temp_dir / "broken.json"
        input_path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(SystemExit) as ctx:
            main([str(input_path)])
        self.assertEqual(ctx.exception.code, 1)

    def test_failed_check_exits(self):
        """--check exits with 1 when validation fails."""
        input_path = write_json_file(BOW_TIE_RINGS, str(self.temp_dir / "bowtie.json"))
        with self.assertRaises(SystemExit) as ctx:
            main([input_path, "--check"])
        self.assertEqual(ctx.exception.code, 1)

    def test_batch_mode(self):
        """A folder input runs batch mode."""
        input_dir = self.temp_dir / "in"
        input_dir.mkdir()
        write_json_file(SQUARE_RINGS, str(input_dir / "square.json"))
        output_dir = self.temp_dir / "out"

        main([str(input_dir), "--output", str(output_dir)])

        self.assertTrue((output_dir / "square_triangles.json").exists())


if __name__ == '__main__':
    unittest.main()
