"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Callable

import pytest


CLI_MAIN = """\
package main

import (
	"flag"
	"fmt"
	"os"
)

func main() {
	name := flag.String("name", "world", "who to greet")
	flag.Parse()
	if *name == "" {
		os.Exit(1)
	}
	fmt.Printf("hello %s\\n", *name)
}
"""

LIBRARY_FILES = {
    "go.mod": "module github.com/acme/geom\n\ngo 1.21\n",
    "doc.go": "// Package geom provides shapes.\npackage geom\n",
    "geom.go": """\
package geom

import "math"

// Shape is anything with an area.
type Shape interface {
	Area() float64
}

type Circle struct {
	R float64
}

func (c Circle) Area() float64 { return math.Pi * c.R * c.R }

func NewCircle(r float64) Circle { return Circle{R: r} }

const Version = "1.0.0"
""",
    "geom_test.go": """\
package geom_test

import "fmt"

func ExampleNewCircle() {
	fmt.Println(1)
}

func BenchmarkArea(b *testing.B) {}
""",
    "internal/calc/calc.go": "package calc\n\nfunc Add(a, b int) int { return a + b }\n",
}


TreeBuilder = Callable[..., Path]


@pytest.fixture
def make_tree(tmp_path: Path) -> TreeBuilder:
    """Write a {relative path: content} mapping under a fresh directory."""
    counter = {"n": 0}

    def build(files: dict[str, str], name: str = "") -> Path:
        counter["n"] += 1
        root = tmp_path / (name or f"project{counter['n']}")
        root.mkdir(parents=True, exist_ok=True)
        for relative, content in files.items():
            path = root / relative
            if relative.endswith("/"):
                path.mkdir(parents=True, exist_ok=True)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return build


@pytest.fixture
def cli_project(make_tree: TreeBuilder) -> Path:
    """Single main.go using flag and os.Exit."""
    return make_tree({"main.go": CLI_MAIN}, name="hello")


@pytest.fixture
def library_project(make_tree: TreeBuilder) -> Path:
    """Small library with an interface, doc.go and example tests."""
    return make_tree(LIBRARY_FILES, name="geom")


@pytest.fixture
def empty_project(make_tree: TreeBuilder) -> Path:
    return make_tree({"README.md": "# nothing here\n"}, name="empty")
