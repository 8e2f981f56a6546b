import argparse, sys
from .docx_io import load_document, load_model
from .errors import WordTemplateError
from .parser import WordTemplateParser
from .renderer import EXIT_INVALID_PARAMETERS, EXIT_TEMPLATE_ERROR, render_template_file, setup_logging
from .settings import CLI_ARG_PAIRS, TemplateSettings


def _add_settings_flags(parser: argparse.ArgumentParser) -> None:
    for flag, field in CLI_ARG_PAIRS:
        parser.add_argument(flag, action="store_true", help=f"Disable {field.replace('_', ' ')}")


def _settings_from_args(a) -> TemplateSettings:
    flags = [flag for flag, _ in CLI_ARG_PAIRS if getattr(a, flag[2:].replace("-", "_"))]
    return TemplateSettings.from_cli_args(flags)


def build():
    p = argparse.ArgumentParser(prog="wordtemplate", description="Fill ${...} markers in DOCX templates")
    sp = p.add_subparsers(dest="cmd", required=True)

    r = sp.add_parser("render", help="Fill a template from a JSON model")
    r.add_argument("--in", dest="inp", required=True)
    r.add_argument("--out", dest="out", required=True)
    r.add_argument("--model", dest="model", required=True, help="JSON file holding the data model")
    r.add_argument("--debug", action="store_true")
    r.add_argument("--log", dest="log", default=None, help="Log file path (optional)")
    _add_settings_flags(r)

    i = sp.add_parser("inspect", help="List the instructions of a template without filling it")
    i.add_argument("--in", dest="inp", required=True)
    i.add_argument("--debug", action="store_true")
    _add_settings_flags(i)
    return p


def _inspect(a, settings: TemplateSettings) -> int:
    setup_logging(a.debug)
    try:
        document = load_document(a.inp, settings.accept_tracked_changes)
        template = WordTemplateParser(settings=settings).parse(document)
    except WordTemplateError as e:
        print(f"❌ Inspection failed: {e}", file=sys.stderr)
        return EXIT_TEMPLATE_ERROR

    for instruction in template:
        print(f"{instruction.kind.value}\t{instruction.expression}")
    print(f"{len(template)} instruction(s)")
    return 0


def _render(a, settings: TemplateSettings) -> int:
    try:
        model = load_model(a.model)
    except WordTemplateError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_INVALID_PARAMETERS

    result = render_template_file(
        input_path=a.inp,
        output_path=a.out,
        model=model,
        settings=settings,
        debug=a.debug,
        log_path=a.log,
    )
    if result['success']:
        print(f"✅ Template rendered successfully")
        print(f"   Instructions applied: {result['instruction_count']}")
        print(f"   Processing time: {result['duration']:.2f}s")
        return 0

    print(f"❌ Rendering failed: {result['error']}", file=sys.stderr)
    return result['exit_code']


def main(argv=None):
    a = build().parse_args(argv)
    settings = _settings_from_args(a)

    try:
        if a.cmd == "inspect":
            code = _inspect(a, settings)
        else:
            code = _render(a, settings)
    except KeyboardInterrupt:
        print("Operation cancelled by user", file=sys.stderr)
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
