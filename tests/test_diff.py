"""Test diff section parsing and ignored-path filtering."""

from gitsum.diff import (
    DiffSection,
    SectionFilter,
    State,
    filter_ignored,
    parse_header,
    parse_sections,
    split_lines,
    unquote,
)

A_SECTION = """diff --git a/a.txt b/a.txt
index abc123..def456 100644
--- a/a.txt
+++ b/a.txt
@@ -1,2 +1,2 @@
 keep
-old a
+new a
"""

B_SECTION = """diff --git a/b.log b/b.log
index 111111..222222 100644
--- a/b.log
+++ b/b.log
@@ -1 +1 @@
-old log
+new log
"""

C_SECTION = """diff --git a/src/c.py b/src/c.py
new file mode 100644
index 0000000..333333
--- /dev/null
+++ b/src/c.py
@@ -0,0 +1 @@
+print('c')
"""

DELETED_SECTION = """diff --git a/build/out.bin b/build/out.bin
deleted file mode 100644
index 444444..0000000
--- a/build/out.bin
+++ /dev/null
@@ -1 +0,0 @@
-binary-ish
"""


def never(path):
    return False


def test_split_lines_round_trip():
    """Test that splitting keeps terminators and a missing final newline."""
    assert split_lines('a\nb\n') == ['a\n', 'b\n']
    assert split_lines('a\nb') == ['a\n', 'b']
    assert split_lines('') == []
    text = 'x\r\ny\n\nz'
    assert ''.join(split_lines(text)) == text


def test_parse_header():
    """Test extracting old/new paths from a diff header."""
    assert parse_header('diff --git a/src/x.py b/src/y.py\n') == ('src/x.py', 'src/y.py')
    assert parse_header('diff --git "a/with space.txt" "b/with space.txt"') == ('with space.txt', 'with space.txt')
    assert parse_header('diff --git nonsense') == (None, None)


def test_parse_header_decodes_escapes():
    """Test quoted header paths have their C-style escapes decoded."""
    header = 'diff --git "a/caf\\303\\251.log" "b/dir/tab\\there.log"\n'
    assert parse_header(header) == ('café.log', 'dir/tab\there.log')
    assert parse_header('diff --git a/plain.txt "b/quo\\"te.txt"') == ('plain.txt', 'quo"te.txt')


def test_unquote():
    """Test porcelain-style quoted paths are decoded, others left alone."""
    assert unquote('"caf\\303\\251.log"') == 'café.log'
    assert unquote('"back\\\\slash"') == 'back\\slash'
    assert unquote('plain.txt') == 'plain.txt'
    assert unquote('"') == '"'


def test_filter_quoted_path():
    """Test an ignored section with a quoted, escaped path is dropped."""
    raw = 'diff --git "a/caf\\303\\251.log" "b/caf\\303\\251.log"\n@@ -1 +1 @@\n-a\n+b\n'
    seen = []

    def is_ignored(path):
        seen.append(path)
        return path.endswith('.log')

    assert filter_ignored(raw, is_ignored) == ''
    assert seen == ['café.log']


def test_dev_null_in_hunk_body_is_content():
    """Test `--- /dev/null` / `+++ /dev/null` lines after the first hunk don't change paths."""
    raw = (
        'diff --git a/notes.txt b/gen/out.log\n'
        'similarity index 90%\n'
        'rename from notes.txt\n'
        'rename to gen/out.log\n'
        '--- a/notes.txt\n'
        '+++ b/gen/out.log\n'
        '@@ -1,2 +1,3 @@\n'
        ' keep\n'
        '+++ /dev/null\n'
        '--- /dev/null\n'
        ' end\n'
    )
    [section] = parse_sections(raw)
    assert (section.source_path, section.dest_path) == ('notes.txt', 'gen/out.log')
    assert not section.in_header
    assert filter_ignored(raw, lambda path: path.startswith('gen/')) == ''


def test_filter_drops_ignored_section():
    """Test that an ignored section is removed and others are kept verbatim."""
    raw = A_SECTION + B_SECTION
    filtered = filter_ignored(raw, lambda path: path == 'b.log')
    assert filtered == A_SECTION
    assert 'b.log' not in filtered


def test_filter_identity_when_nothing_ignored():
    """Test the filter is the identity when no path is ignored."""
    raw = A_SECTION + B_SECTION + C_SECTION + DELETED_SECTION.rstrip('\n')
    assert filter_ignored(raw, never) == raw


def test_filter_empty():
    """Test empty input produces empty output."""
    assert filter_ignored('', never) == ''
    assert filter_ignored('', lambda path: True) == ''


def test_filter_preserves_order():
    """Test retained sections keep their relative order."""
    raw = C_SECTION + B_SECTION + A_SECTION
    assert filter_ignored(raw, lambda path: path == 'b.log') == C_SECTION + A_SECTION


def test_filter_is_stable():
    """Test inputs differing only by an ignored section filter identically."""
    def is_ignored(path):
        return path.endswith('.log')

    with_log = filter_ignored(A_SECTION + B_SECTION, is_ignored)
    without_log = filter_ignored(A_SECTION, is_ignored)
    assert with_log == without_log
    assert filter_ignored(B_SECTION + A_SECTION, is_ignored) == without_log


def test_filter_deleted_uses_source_path():
    """Test a deletion's section is checked against its source path."""
    seen = []

    def is_ignored(path):
        seen.append(path)
        return path.startswith('build/')

    raw = A_SECTION + DELETED_SECTION
    assert filter_ignored(raw, is_ignored) == A_SECTION
    assert seen == ['a.txt', 'build/out.bin']


def test_filter_passes_preamble_through():
    """Test lines before the first header are emitted unchanged."""
    raw = 'warning: something\n' + B_SECTION
    assert filter_ignored(raw, lambda path: True) == 'warning: something\n'


def test_filter_keeps_unparseable_header():
    """Test a section whose header can't be parsed is always kept."""
    raw = 'diff --git weird-header\n+line\n'
    assert filter_ignored(raw, lambda path: True) == raw


def test_section_filter_records_dropped():
    """Test the state machine tracks kept and dropped sections."""
    section_filter = SectionFilter(lambda path: path == 'b.log')
    assert section_filter.state is State.OUTSIDE
    for line in split_lines(A_SECTION + B_SECTION):
        section_filter.feed(line)
    assert section_filter.state is State.INSIDE
    section_filter.finish()
    assert section_filter.state is State.OUTSIDE
    assert [s.path for s in section_filter.kept] == ['a.txt']
    assert [s.path for s in section_filter.dropped] == ['b.log']


def test_parse_sections():
    """Test splitting a diff into per-file sections."""
    sections = parse_sections(A_SECTION + C_SECTION + DELETED_SECTION)
    assert len(sections) == 3
    a, c, deleted = sections
    assert (a.source_path, a.dest_path) == ('a.txt', 'a.txt')
    assert ''.join(a.lines) == A_SECTION
    assert c.source_path is None
    assert c.path == 'src/c.py'
    assert deleted.dest_path is None
    assert deleted.path == 'build/out.bin'


def test_section_output_never_exceeds_input():
    """Test output never has more sections than input."""
    raw = A_SECTION + B_SECTION + C_SECTION
    for ignored in ({'a.txt'}, {'b.log', 'src/c.py'}, set()):
        filtered = filter_ignored(raw, ignored.__contains__)
        sections = parse_sections(filtered)
        assert len(sections) == 3 - len(ignored)
        assert not any(s.path in ignored for s in sections)


def test_diff_section_from_header():
    """Test building a section from its header line."""
    section = DiffSection.from_header('diff --git a/x b/y\n')
    assert section.lines == ['diff --git a/x b/y\n']
    assert section.path == 'y'
