"""Languages the editor offers, with their starter programs."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Language:
    id: str
    name: str
    extension: str
    default_code: str


LANGUAGES: tuple[Language, ...] = (
    Language(
        id="javascript",
        name="JavaScript",
        extension=".js",
        default_code='console.log("Hello World!");',
    ),
    Language(
        id="python",
        name="Python",
        extension=".py",
        default_code='print("Hello World!")',
    ),
    Language(
        id="java",
        name="Java",
        extension=".java",
        default_code=(
            "public class Main {\n"
            "  public static void main(String[] args) {\n"
            '    System.out.println("Hello World!");\n'
            "  }\n"
            "}"
        ),
    ),
    Language(
        id="cpp",
        name="C++",
        extension=".cpp",
        default_code=(
            "#include <iostream>\n"
            "using namespace std;\n"
            "\n"
            "int main() {\n"
            '    cout << "Hello World!" << endl;\n'
            "    return 0;\n"
            "}"
        ),
    ),
)

_BY_ID: dict[str, Language] = {lang.id: lang for lang in LANGUAGES}
_BY_EXTENSION: dict[str, Language] = {lang.extension: lang for lang in LANGUAGES}


def get_language(language_id: str) -> Language:
    try:
        return _BY_ID[language_id]
    except KeyError:
        raise ValueError(
            f"Unknown language: {language_id!r}. Known: {sorted(_BY_ID)}"
        ) from None


def language_for_path(path: str) -> Language | None:
    """Guess the language from a file name, or None if the extension is unknown."""
    dot = path.rfind(".")
    if dot == -1:
        return None
    return _BY_EXTENSION.get(path[dot:].lower())
