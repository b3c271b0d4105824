"""Shared pytest fixtures for Kotlin Explorer tests."""

from pathlib import Path

import pytest

from kotlin_explorer.config import resolve_tool_paths

# dexdump -d output: one runtime class, one user class with a direct and a virtual method
SAMPLE_DEX = """\
Processing 'classes.dex'...
Opened 'classes.dex', DEX version '035'
Class #0            -
  Class descriptor  : 'Lkotlin/Foo;'
  Access flags      : 0x0011 (PUBLIC FINAL)
  Superclass        : 'Ljava/lang/Object;'
  Interfaces        -
  Static fields     -
  Instance fields   -
  Direct methods    -
    #0              : (in Lkotlin/Foo;)
      name          : 'foo'
      type          : '()V'
      access        : 0x0019 (PUBLIC STATIC FINAL)
      code          -
      registers     : 0
      ins           : 0
      outs          : 0
      insns size    : 1 16-bit code units
000110:                                        |[000110] kotlin.Foo.foo:()V
000120: 0e00                                   |0000: return-void
      catches       : (none)
      positions     :
      locals        :

  Virtual methods   -
  source_file_idx   : 3 (Foo.kt)

Class #1            -
  Class descriptor  : 'Lcom/example/Bar;'
  Access flags      : 0x0011 (PUBLIC FINAL)
  Superclass        : 'Ljava/lang/Object;'
  Interfaces        -
  Static fields     -
  Instance fields   -
  Direct methods    -
    #0              : (in Lcom/example/Bar;)
      name          : 'bar'
      type          : '()V'
      access        : 0x0019 (PUBLIC STATIC FINAL)
      code          -
      registers     : 1
      ins           : 0
      outs          : 0
      insns size    : 3 16-bit code units
000148:                                        |[000148] com.example.Bar.bar:()V
000158: 1a00 0100                              |0000: const-string v0, "hi" // string@0001
00015c: 0e00                                   |0002: return-void
      catches       : (none)
      positions     :
        0x0000 line=3
      locals        :

  Virtual methods   -
    #0              : (in Lcom/example/Bar;)
      name          : 'baz'
      type          : '(I)I'
      access        : 0x0011 (PUBLIC FINAL)
      code          -
      registers     : 2
      ins           : 2
      outs          : 0
      insns size    : 3 16-bit code units
000170:                                        |[000170] com.example.Bar.baz:(I)I
000180: d800 0101                              |0000: add-int/lit8 v0, v1, #int 1 // #01
000184: 0f00                                   |0002: return v0
      catches       : (none)
      positions     :
        0x0000 line=5
      locals        :
        0x0000 - 0x0003 reg=0 this Lcom/example/Bar;

  source_file_idx   : 4 (Bar.kt)

"""

EXPECTED_DEX = """\
class com.example.Bar
    bar()V // com.example.Bar.bar()
        0000: const-string v0, "hi" // string@0001
        0002: return-void

    baz(I)I // com.example.Bar.baz()
        0000: add-int/lit8 v0, v1, #int 1 // #01
        0002: return v0

"""

# oatdump output for the same two classes
SAMPLE_OAT = """\
MAGIC:
oat
064

LOCATION:
/sdcard/classes.oat

OatDexFile:
location: /sdcard/classes.dex
checksum: 0x5a1b2c3d
0: Lkotlin/Foo; (offset=0x00000510) (type_idx=2) (Verified) (AllCompiled)
  0: void kotlin.Foo.foo() (dex_method_idx=1)
    DEX CODE:
      0x0000: 0e00                     \t| return-void
    OatMethodOffsets (offset=0x00000000)
    CODE: (code_offset=0x00001000 size=4)...
      0x00001000: d65f03c0\tret
1: Lcom/example/Bar; (offset=0x00000518) (type_idx=3) (Verified) (AllCompiled)
  0: void com.example.Bar.bar() (dex_method_idx=2)
    DEX CODE:
      0x0000: 0e00                     \t| return-void
    OatMethodOffsets (offset=0x00000000)
    CODE: (code_offset=0x00001010 size=8)...
      0x00001010: d10083ff\tsub sp, sp, #0x20 (32)
      0x00001014: d65f03c0\tret
  1: int com.example.Bar.baz(int) (dex_method_idx=3)
    DEX CODE:
      0x0000: d800 0101                \t| add-int/lit8 v0, v1, #+1
    OatMethodOffsets (offset=0x00000000)
    CODE: (code_offset=0x00001020 size=8)...
      0x00001020: 11000420\tadd w0, w1, #0x1 (1)
      0x00001024: d65f03c0\tret
"""

EXPECTED_OAT = """\
class com.example.Bar
    void com.example.Bar.bar()
        0x00001010: sub sp, sp, #0x20 (32)
        0x00001014: ret

    int com.example.Bar.baz(int)
        0x00001020: add w0, w1, #0x1 (1)
        0x00001024: ret
"""


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")


@pytest.fixture
def sdk_homes(tmp_path):
    """Fake Android SDK and Kotlin distribution layouts with every tool present."""
    android = tmp_path / "android"
    kotlin = tmp_path / "kotlin"
    for rel in (
        "platform-tools/adb",
        "build-tools/33.0.1/lib/d8.jar",
        "build-tools/33.0.1/dexdump",
        "build-tools/34.0.0/lib/d8.jar",
        "build-tools/34.0.0/dexdump",
        "platforms/android-33/android.jar",
        "platforms/android-34/android.jar",
    ):
        _touch(android / rel)
    for rel in (
        "bin/kotlinc",
        "lib/kotlin-stdlib-jdk8.jar",
        "lib/kotlin-stdlib.jar",
        "lib/kotlin-annotations-jvm.jar",
    ):
        _touch(kotlin / rel)
    return android, kotlin


@pytest.fixture
def tool_paths(sdk_homes, tmp_path):
    android, kotlin = sdk_homes
    return resolve_tool_paths(android, kotlin, tmp_path / "scratch")


@pytest.fixture
def dex_dump():
    return SAMPLE_DEX


@pytest.fixture
def oat_dump():
    return SAMPLE_OAT


@pytest.fixture
def expected_dex():
    return EXPECTED_DEX


@pytest.fixture
def expected_oat():
    return EXPECTED_OAT
