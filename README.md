# dragonvm

A small stack-based virtual machine together with an assembler for a tiny
assembly language built from macros.

## Installing

```
pip install .
```

## Running a program

```
dragon run program.dr
```

The `run` command reads the file, collects its macros, expands the `main`
macro, assembles it into opcodes, prints them and runs them on the virtual
machine.

## The language

A program is a set of macros. Each macro has a name and a body in braces:

```
macro double {
    dup add
}

macro main {
    push 21
    double
    print
    halt
}
```

Every name must be unique, and a macro called `main` is required. Any bare
name inside `main` is replaced with the body of the macro it names.

Instructions:

| Instruction      | Effect                                                        |
|------------------|---------------------------------------------------------------|
| `push N`         | push the number `N`                                           |
| `pop`            | remove the top value                                          |
| `dup`            | push a copy of the top value                                  |
| `add`, `+`       | push the sum of the top two values                            |
| `sub`, `-`       | push the second value minus the top value                     |
| `mul`, `*`       | push the product of the top two values                        |
| `sqrt`           | push the square root of the top value                         |
| `set K`          | store the top value under key `K`                             |
| `get K`, `$ K`   | push the value stored under key `K`                           |
| `pi`, `tau`, `e` | push the matching mathematical constant                       |
| `pc`             | push the current program counter                              |
| `jump N`         | continue at instruction `N`                                   |
| `print`          | print the top value                                           |
| `halt`           | stop the program                                              |

Arithmetic instructions leave their operands on the stack and push the result
on top. Keys 1, 2 and 3 hold pi, tau and e from the start. Text from `//` to the
end of a comment run is ignored.

## Using it from Python

```python
from dragonvm.cli import compile_source, default_constants
from dragonvm.vm import Vm

opcodes = compile_source(open("program.dr").read())
Vm(opcodes, default_constants(), output=print).execute()
```

`dragonvm.tokens.lex` turns source text into tokens, and
`dragonvm.assembler.Assembler` reads macros from tokens and assembles token
lists into opcodes.