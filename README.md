# medit

The core of a small Emacs-style text editor, as a pure-Python library with no
third-party dependencies:

- **Buffers and windows** (`medit.buffers`): `Editor`, `Buffer`, `Window` and
  `Line`; named buffers of lines, the buffer list (`Editor.make_list`,
  `Editor.list_buffers`), change tracking and buffer sizes.
- **Cursor motion** (`medit.motion`): character, line, page and paragraph
  movement, `goto_line`, `set_mark` and `swap_mark`.
- **Screen bookkeeping** (`medit.screen`, `medit.modeline`): `VirtualScreen`
  with tab expansion and line wrapping, `plan_line_update` for minimal row
  updates, `visible_char`, `display_offset`, and `format_modeline`.
- **Message line** (`medit.msgline`): `format_message` (the small `%d %o %x
  %s` message format), `expand_escapes` and `read_reply`, which edits a prompt
  reply from a sequence of keys and raises `ReplyAborted` on C-G.
- **Blowfish** (`medit.blowfish`): the Blowfish block cipher.
- **MEL** (`medit.mel`, `medit.melobjects`): a tiny stack-based extension
  language.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## The Blowfish cipher

`medit.blowfish.Blowfish` takes a key of any length and works on single
8-byte blocks:

```python
from medit.blowfish import Blowfish

cipher = Blowfish(b"secret")
block = cipher.encrypt_block(b"8 bytes!")
assert cipher.decrypt_block(block) == b"8 bytes!"
```

A block of any other length raises `ValueError`.

## MEL, the extension language

MEL is a postfix language: words are separated by blanks, numbers and
`<strings>` are pushed on a stack, and named words run. Start an interactive
session with:

```
mel
```

It first runs `.melrc` from the current directory if that file is readable.

A few words to begin with:

| word | effect |
|------|--------|
| `+ - * / %` | arithmetic on the top two values |
| `eq ne lt gt le ge` | comparisons, leaving 1 or 0 |
| `.` | concatenate two strings |
| `=` / `?` | print and drop / print the top of the stack |
| `dup drop over rot exch clear depth` | stack handling |
| `{ ... }` | build a thread (a block of code) |
| `rpt loop if exec` | run threads |
| `def set` | name values |
| `hex oct dec` | number output radix |
| `.s` | print the whole stack |
| `q` | quit |

```
> 2 3 + =
5
> { <hi> = } 3 rpt
<hi>
<hi>
<hi>
```

From Python, `medit.mel.Interpreter` runs MEL text and lets you inspect or
extend its stack and names with `run`, `push`, `pop`, `lookup` and `define`:

```python
import io
from medit.mel import Interpreter

out = io.StringIO()
mel = Interpreter(out)
mel.run("2 3 + =")
assert out.getvalue() == "5\n"
```

## What this package does not do

- It is a library of editor pieces, not a runnable editor: there is no
  terminal driver, no key bindings and no command to open and edit files.
- It does not read or write files into buffers.
- It provides the Blowfish cipher only; there is no encrypted file format
  built on it and no command for encrypting or decrypting files.