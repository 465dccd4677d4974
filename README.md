# limecore

Building blocks for the backend of a programmer's text editor. They do not depend on any
particular frontend. Everything is plain Python with no third-party dependencies.

## Modules

- `limecore.log` is a small levelled logger. It provides `Level` and `Logger`. Named
  filters send records at or above a level to writers, which are `ConsoleLogWriter`,
  `FileLogWriter` and `CallbackLogWriter`. `format_log_record` renders a record as one
  line. Module-level helpers such as `info`, `warn`, `error` and `logf` use a shared
  global logger, which prints to standard output from `DEBUG` up.
- `limecore.keys` reads key bindings in the sublime-keymap JSON format. It provides
  `Key`, `KeyPress`, `KeyContext`, `KeyBinding`, `KeyBindings` and `Op`.
  `KeyBindings.filter` narrows a table by the next key press. `KeyBindings.action`
  picks the highest-priority complete binding whose contexts all hold. Tables can have
  a parent table, set with `set_parent`.
- `limecore.render` covers regions and how they are drawn:
  - `Region` and `RegionSet`, which merges overlapping regions.
  - `Colour`, read from `"#AARRGGBB"` or an RGBA object, and the colour-scheme `Settings`.
  - `Font`, `FontStyle` and `ViewRegionFlags`.
  - `ViewRegions` and `ViewRegionMap`, with culling to a viewport.
  - `transform`, which groups regions by `Flavour` into a `Recipe`.
    `Recipe.transcribe` then orders them as a list of `RenderUnit`s.
- `limecore.parser` has the scope tree `Node` and `NodeHighlighter`, which you get from
  `new_syntax_highlighter`. `NodeHighlighter` answers `scope_name` and `scope_extent`
  for a point. `flatten` turns the tree into a `ViewRegionMap`.
- `limecore.commands` defines the command classes `ApplicationCommand`, `WindowCommand`
  and `TextCommand`, with defaults in `DefaultCommand` and `BypassUndoCommand`. It also
  provides `CommandHandler`:
  - it registers commands by name, or by `default_name` (`HelloCommand` becomes
    `hello`);
  - it fills dataclass command fields from an argument dictionary;
  - it runs commands;
  - it raises `CommandError` for failed registration or initialisation.
- `limecore.undo` provides `Edit`, `CompositeAction` and `UndoStack`. The stack has soft
  and hard `undo` and `redo`, and `glue_from` merges several edits into one.
- `limecore.clipboard` has `SystemClipboard`, which remembers whether its text came from
  an auto-expanded cursor.
- `limecore.events` provides:
  - ordered callback lists (`Event`) and the editor's event instances (`ON_LOAD`,
    `ON_NEW_WINDOW`, `ON_PROJECT_CHANGED`, ...);
  - context queries (`QueryContextEvent`, `ON_QUERY_CONTEXT`, `builtin_query_context`
    for `setting.<name>` and `num_selections`);
  - the abstract `Frontend` interface and `PromptFlags`.
- `limecore.project` has `Project`, a list of `Folder`s plus nested `Settings`.
  `load_json`, `to_json`, `load` and `save_as` read and write sublime-project style
  files.
- `limecore.syntax` provides:
  - `syntax_provider` and `syntax_highlighter`, which look up a syntax through a mapping
    or a callable; `syntax_highlighter` falls back to `PlainSyntax`;
  - `PlainScheme` and `default_scheme`, a white-background fallback colour scheme.

## Installing

```
pip install limecore
```

## Examples

Matching key bindings:

```python
from limecore.keys import KeyBindings, KeyPress

bindings = KeyBindings()
bindings.load_json('[{"keys": ["ctrl+i"], "command": "indent"}]')

matches = bindings.filter(KeyPress(key=ord("i"), ctrl=True))
binding = matches.action(lambda key, op, operand, match_all: True)
print(binding.command)  # indent
```

Culling regions to a viewport:

```python
from limecore.render import Region, ViewRegions

vr = ViewRegions()
vr.regions.add_all([Region(100, 200), Region(300, 400)])
vr.cull(Region(150, 350))
print(vr.regions.regions())  # [Region(a=150, b=200), Region(a=300, b=350)]
```

Registering and running a command:

```python
from limecore.commands import ApplicationCommand, CommandHandler, DefaultCommand

class HelloCommand(DefaultCommand, ApplicationCommand):
    def run(self):
        print("hello")

handler = CommandHandler()
handler.register_with_default(HelloCommand())
handler.run_application_command("hello", {})
```

## What it does not do

This is a library of parts, not an editor. It does not include:

- text buffers;
- views, windows or an editor object that ties them together;
- keyboard input handling;
- loading of packages, settings files or keymaps from disk;
- a command-line program.

Views and windows are passed in by the caller. For example, `CommandHandler` calls a
view's or window's `run_command` when it has one. `builtin_query_context` reads a view's
`settings` and `sel`.

`SystemClipboard` does not talk to the operating system's clipboard on its own. It uses
only the `read` and `write` functions you give it, and otherwise keeps a local copy.

## Running the tests

```
pip install limecore[test]
pytest
```