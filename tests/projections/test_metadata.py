"""
Unit tests for component metadata extraction.
"""
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
from analyzer import metadata_parser
from scanner.config import ScanConfig
from scanner.errors import MissingArgumentError
from scanner.source import MemorySourceProvider

ROOT = {'description': '', 'methods': []}

PROPS_WITH_COMMENTS = {
    'hello': {
        'description': 'hello comment',
        'required': False,
        'type': {'name': 'bool'},
    },
    'goodbye': {
        'description': 'goodbye comment',
        'required': True,
        'type': {'name': 'string'},
    },
    'nuts': {
        'description': 'Mr. Deez\n Nuts',
        'required': False,
        'type': {
            'name': 'enum',
            'value': [
                {'computed': False, 'value': "'deez'"},
                {'computed': False, 'value': "'deeez'"},
            ],
        },
    },
}


def parse(files, path):
    """Run the metadata parser over an in-memory project rooted at /project."""
    files = {os.path.join('/project', name): source for name, source in files.items()}
    return metadata_parser(os.path.join('/project', path), provider=MemorySourceProvider(files),
                           config=ScanConfig())


class TestMissingInput:

    def test_missing_path(self):
        provider = MemorySourceProvider()
        with pytest.raises(MissingArgumentError) as excinfo:
            metadata_parser(provider=provider)
        assert str(excinfo.value) == 'ERROR: Missing required `path` argument'
        assert provider.read_count == 0


class TestComponentsWithoutData:
    """Components that declare nothing give the bare result."""

    def test_functional_component(self):
        result = parse({'simple-functional.js': '''
            import React from 'react';
            export default () => <div>Hello World!</div>;
        '''}, 'simple-functional.js')
        assert result == ROOT

    def test_anonymous_class_component(self):
        result = parse({'simple-class.js': '''
            import React from 'react';
            export default class extends React.Component {
              render() { return <div></div>; }
            }
        '''}, 'simple-class.js')
        assert result == ROOT


class TestProps:
    """Tests for propTypes extraction."""

    def test_functional_component(self):
        result = parse({'functional-with-props.js': '''
            import React from 'react';
            import PropTypes from 'prop-types';
            const component = () => <div></div>;
            component.propTypes = {
              /** hello comment */
              hello: PropTypes.bool,

              /** goodbye comment */
              goodbye: PropTypes.string.isRequired,

              /** Mr. Deez
               *  Nuts
               *  */
              nuts: PropTypes.oneOf(['deez', 'deeez'])
            };
            export default component;
        '''}, 'functional-with-props.js')
        assert result == {**ROOT, 'props': PROPS_WITH_COMMENTS}

    def test_class_component(self):
        result = parse({'class-with-props.js': '''
            import React from 'react';
            import PropTypes from 'prop-types';
            export default class Component extends React.Component {
              static propTypes = {
                /** hello comment */
                hello: PropTypes.bool,

                /** goodbye comment */
                goodbye: PropTypes.string.isRequired,

                /** Mr. Deez
                *  Nuts
                *  */
                nuts: PropTypes.oneOf(['deez', 'deeez'])
              };

              render() {
                return '';
              }
            }
        '''}, 'class-with-props.js')
        assert result == {**ROOT, 'displayName': 'Component', 'props': PROPS_WITH_COMMENTS}

    def test_spread_props_from_other_components(self):
        """Spreading another component merges its propTypes in order."""
        result = parse({
            'spread-functional.js': '''
                import React from 'react';
                import PropTypes from 'prop-types';
                import moreProps from './more-props.js';
                import evenMoreProps from './even-more-props.js';
                const component = () => <div>Hello World!</div>;
                component.propTypes = {
                  ...moreProps,
                  ...evenMoreProps,
                  shapeProp: PropTypes.shape({
                    stringProp: PropTypes.string,
                    funcProp: PropTypes.func.isRequired
                  })
                };
                export default component;
            ''',
            'more-props.js': '''
                import React from 'react';
                import PropTypes from 'prop-types';
                const component = ({propFromAnotherFile}) => <div></div>;
                component.propTypes = {
                  propFromAnotherFile: PropTypes.bool.isRequired
                };
                export default component;
            ''',
            'even-more-props.js': '''
                import React from 'react';
                import PropTypes from 'prop-types';
                const component = ({ propFromYetAnotherFile }) => <div></div>;
                component.propTypes = {
                  propFromYetAnotherFile: PropTypes.string.isRequired
                };
                export default component;
            ''',
        }, 'spread-functional.js')

        assert list(result['props']) == ['propFromAnotherFile', 'propFromYetAnotherFile', 'shapeProp']
        assert result == {**ROOT, 'props': {
            'propFromAnotherFile': {'description': '', 'type': {'name': 'bool'}, 'required': True},
            'propFromYetAnotherFile': {'description': '', 'type': {'name': 'string'}, 'required': True},
            'shapeProp': {
                'description': '',
                'required': False,
                'type': {
                    'name': 'shape',
                    'value': {
                        'funcProp': {'name': 'func', 'required': True},
                        'stringProp': {'name': 'string', 'required': False},
                    },
                },
            },
        }}

    def test_default_props_and_description(self):
        result = parse({'Button.js': '''
            import React from 'react';
            import PropTypes from 'prop-types';

            /** A button */
            export default class Button extends React.Component {
              static propTypes = {
                size: PropTypes.oneOf(['s', 'm']),
                onClick: PropTypes.func,
              };

              static defaultProps = {
                size: 's',
                onClick: noop,
              };
            }
        '''}, 'Button.js')
        assert result['description'] == 'A button'
        assert result['displayName'] == 'Button'
        assert result['props']['size']['defaultValue'] == {'value': "'s'", 'computed': False}
        assert result['props']['onClick']['defaultValue'] == {'value': 'noop', 'computed': True}

    def test_prop_types_held_in_variables(self):
        """PropTypes calls stored in earlier statements are read through."""
        result = parse({'sized.js': '''
            import PropTypes from 'prop-types';
            const component = () => null;
            const sizes = PropTypes.oneOf(['deez', 'deeez']);
            const flag = PropTypes.bool
            component.propTypes = {nuts: sizes, flag};
            export default component;
        '''}, 'sized.js')
        assert result['props'] == {
            'nuts': {
                'description': '',
                'required': False,
                'type': PROPS_WITH_COMMENTS['nuts']['type'],
            },
            'flag': {'description': '', 'required': False, 'type': {'name': 'bool'}},
        }

    def test_unknown_prop_type_is_omitted(self):
        result = parse({'a.js': '''
            const component = () => null;
            component.propTypes = {known: PropTypes.number, unknown: somethingCustom};
            export default component;
        '''}, 'a.js')
        assert list(result['props']) == ['known']


class TestReExportedComponents:
    """`export {default} from` is followed to the component."""

    def test_single_hop(self):
        result = parse({
            'index.js': "export {default} from './component.js';",
            'component.js': '''
                /** I am the one who props */
                const component = () => <div/>;
                export default component;
            ''',
        }, 'index.js')
        assert result == {'description': 'I am the one who props', 'methods': []}

    def test_nested_exports(self):
        result = parse({
            'index.js': "export {default} from './sibling.js'",
            'sibling.js': "export {default} from './nested/deep/component.js'",
            'nested/deep/component.js': "export {default} from '../component.js'",
            'nested/component.js': '''
                /** You got me */
                const component = () => <div/>;
                export default component;
            ''',
        }, 'index.js')
        assert result == {'description': 'You got me', 'methods': []}

    def test_directory_entry(self):
        """A directory path is read through its index.js."""
        result = parse({
            'Button/index.js': "export {default} from './Button';",
            'Button/Button.js': '/** Clickable */\nexport default function Button() { return null; }',
        }, 'Button')
        assert result == {'description': 'Clickable', 'methods': []}
