"""
Leading comment attachment.

The grammar ignores comments, so docblocks are recovered in a separate pass
over the raw source: each block comment is keyed by the offset of the first
non-whitespace character that follows it. A node owns a comment when it
starts at exactly that offset.
"""
import re

# Strings and templates are matched only so that comment markers inside them
# are skipped.
_TOKENS = re.compile(
    r"""'(?:[^'\\\n]|\\.)*'"""
    r'''|"(?:[^"\\\n]|\\.)*"'''
    r"""|`(?:[^`\\]|\\.)*`"""
    r"""|//[^\n]*"""
    r"""|(?P<block>/\*[\s\S]*?\*/)"""
)
_WHITESPACE = re.compile(r'\s*')
_LINE_MARKER = re.compile(r'^\s*\*\s?')


def normalize_comment(comment):
    """Strip the comment delimiters and leading `*` markers.

    '/** Mr. Deez\\n *  Nuts\\n *  */' becomes 'Mr. Deez\\n Nuts'.
    """
    body = comment[2:-2] if comment.startswith('/*') else comment
    lines = [_LINE_MARKER.sub('', line, count=1) for line in body.split('\n')]
    return '\n'.join(lines).strip()


def collect_comments(source):
    """Map node start offsets to the text of the block comment right before them."""
    comments = {}
    for match in _TOKENS.finditer(source):
        block = match.group('block')
        if block is None:
            continue
        anchor = _WHITESPACE.match(source, match.end()).end()
        if anchor < len(source):
            comments[anchor] = normalize_comment(block)
    return comments
