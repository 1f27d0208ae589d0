import argparse
import sys

from nativegen import logging as nativegen_logging
from nativegen import utils
from nativegen.errors import (ModifierError, ResolutionError, TemplateError,
                              ValidationError)
from nativegen.frontend import load_template
from nativegen.generator import build_constant_pool, generate
from nativegen.resolver import resolve_variants
from nativegen.validator import validate_class, validate_links

logger = nativegen_logging.get_logger(__name__)

_GENERATION_ERRORS = (ModifierError, ValidationError, ResolutionError, TemplateError)


def _add_common_arguments(parser):
    parser.add_argument(
        '--config',
        '-c',
        type=str,
        dest='config_file',
        help='The configuration file to use'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        help='Console log level (DEBUG, INFO, WARNING, ERROR)'
    )

    parser.add_argument(
        '--log-dir',
        type=str,
        default=None,
        help='Also write a log file into this directory'
    )


def parse_generate(parser):
    parser.add_argument(
        'templates',
        nargs='+',
        help='Template files (.toml or .json) describing native classes'
    )

    parser.add_argument(
        '--output-dir',
        '-o',
        type=str,
        required=True,
        help='The directory the Java and C sources are written to'
    )

    _add_common_arguments(parser)


def parse_validate(parser):
    parser.add_argument(
        'templates',
        nargs='+',
        help='Template files (.toml or .json) to check'
    )

    _add_common_arguments(parser)


def parse_variants(parser):
    parser.add_argument(
        'template',
        help='The template file (.toml or .json) to inspect'
    )

    parser.add_argument(
        '--function',
        '-f',
        type=str,
        default=None,
        help='Only list the methods of this native function'
    )

    _add_common_arguments(parser)


def _load_templates(paths):
    return [load_template(path) for path in paths]


def run_generate(parser, args, config):
    native_classes = _load_templates(args.templates)
    written = generate(native_classes, args.output_dir, config)
    for path in written:
        print(path)
    print(f'✅ Generated {len(native_classes)} classes into {args.output_dir}')


def run_validate(parser, args, config):
    native_classes = _load_templates(args.templates)
    for native_class in native_classes:
        validate_class(native_class)

    constants = build_constant_pool(native_classes)
    for path, native_class in zip(args.templates, native_classes):
        validate_links(native_class, constants)
        print(f'✅ {path}: {native_class.class_name} ({len(native_class.functions)} functions)')


def run_variants(parser, args, config):
    native_class = load_template(args.template)
    validate_class(native_class)

    functions = native_class.functions
    if args.function is not None:
        functions = [func for func in functions if func.name == args.function]
        if not functions:
            parser.error(f'No function named {args.function} in {native_class.class_name}')

    for func in functions:
        print(func.describe())
        if func.is_simple_function:
            print(f'\tnative {func.name}')
            continue
        if not func.returns.is_char_sequence:
            print('\tbaseline')
        for variant in resolve_variants(func):
            print(f'\t{variant.name}: {variant.description} {variant.transforms}')


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='nativegen: Java and JNI binding generator for native APIs'
    )

    subparsers = parser.add_subparsers(
        dest='subcommand',
        description='valid subcommands for nativegen',
        help='Use one of these subcommands followed by -h for additional help',
        required=True
    )

    generate_parser = subparsers.add_parser(
        'generate',
        help='Generate Java and C sources from templates'
    )

    validate_parser = subparsers.add_parser(
        'validate',
        help='Load and validate templates without writing anything'
    )

    variants_parser = subparsers.add_parser(
        'variants',
        help='List the methods generated for each function of a template'
    )

    parse_generate(generate_parser)
    parse_validate(validate_parser)
    parse_variants(variants_parser)

    args = parser.parse_args(argv)

    config = utils.try_load_config(args.config_file)
    nativegen_logging.configure_logging(
        config,
        console_level_override=args.log_level,
        log_dir_override=args.log_dir,
        force_reconfigure=True,
    )

    try:
        match args.subcommand:
            case 'generate':
                run_generate(parser, args, config)
            case 'validate':
                run_validate(parser, args, config)
            case 'variants':
                run_variants(parser, args, config)
            case _:
                parser.print_help()
    except _GENERATION_ERRORS as e:
        logger.error("%s", e)
        print(f'❌ {e}', file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
