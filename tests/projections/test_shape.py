"""
Unit tests for describing testkit driver exports.
"""
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
from analyzer import get_export
from scanner.config import ScanConfig
from scanner.errors import MissingArgumentError
from scanner.source import MemorySourceProvider

EXPECTED = [
    {'name': 'driver', 'type': 'object', 'props': [
        {'name': 'method', 'type': 'function', 'args': [{'name': 'arg'}]},
    ]},
]

DRIVER_CASES = {
    'default arrow function without block statement': (
        '''
        import driver from './driver.js';
        export default () => ({
          driver
        })''',
        '''export default () => ({
          method: arg => {}
        })''',
    ),
    'default arrow function with block statement': (
        '''
        import driver from './driver.js';
        export default () => ({
          driver
        })''',
        '''export default () => {
           return {
             method: arg => {}
           }
        }''',
    ),
    'default function': (
        '''
        import driver from './driver.js';
        export default () => ({
          driver
        })''',
        '''export default function() {
           return {
             method: arg => {}
           }
        }''',
    ),
    'identifier in imported file': (
        '''
        import driver from './driver.js';
        export default () => ({
          driver
        })''',
        '''
         const symbol = {
           method: arg => {}
         };
         export default function() {
           return symbol;
         }''',
    ),
    'named arrow function': (
        '''
        import {driver} from './driver.js';
        export default () => ({
          driver
        })''',
        '''
          export const driver = () => ({
            method: arg => {}
          });
          export default () => ({
            anotherMethod: () => {}
          })''',
    ),
    'factory function': (
        '''
        import driverFactory from './driver.js';
        const driver = driverFactory();
        export default () => ({
          driver
        })''',
        '''
          export default () => ({
            method: arg => {}
          })''',
    ),
    'factory function called after other statements': (
        '''
        import driverFactory from './driver.js';
        const selector = '[data-hook="button"]';
        const driver = driverFactory(selector);
        export default () => ({driver});''',
        '''
          export default selector => ({
            method: arg => {}
          })''',
    ),
    'member expression': (
        '''
        import driverFactory from './driver.js';
        export default () => ({
          driver: driverFactory().anotherDriver
        })''',
        '''
          export default () => ({
            anotherDriver: {
              method: arg => {}
            }
          })''',
    ),
    'object spread on factory function': (
        '''
        import driverFactory from './driver.js';
        export default () => ({
          ...driverFactory()
        })
        ''',
        '''
          export default () => ({
            driver: {
              method: arg => {}
            }
          })
        ''',
    ),
    'export { x as y } from z': (
        '''
          export { internalDriver as driverFactory } from './driver.js';
        ''',
        '''
        export const internalDriver = () => ({
          driver: {
            method: arg => {}
          }
        });
        ''',
    ),
}


def describe(source, files):
    provider = MemorySourceProvider(files)
    return get_export(source=source, base_dir='/project', provider=provider, config=ScanConfig())


class TestDriverImports:
    """Drivers are described through every supported import form."""

    @pytest.mark.parametrize("code,driver", list(DRIVER_CASES.values()), ids=list(DRIVER_CASES))
    def test_driver_shape(self, code, driver):
        assert describe(code, {'/project/driver.js': driver}) == EXPECTED


class TestShapes:

    def test_path_input(self):
        """A module on the provider can be described by path."""
        provider = MemorySourceProvider({
            '/project/testkit/index.js': "export default {click: (selector, times) => {}, nested: {hover() {}}};",
        })
        result = get_export(path='/project/testkit', provider=provider, config=ScanConfig())
        assert result == [
            {'name': 'click', 'type': 'function', 'args': [{'name': 'selector'}, {'name': 'times'}]},
            {'name': 'nested', 'type': 'object', 'props': [
                {'name': 'hover', 'type': 'function', 'args': []},
            ]},
        ]

    def test_unevaluatable_members_are_omitted(self):
        result = describe("import x from 'x';\nexport default {a: x, b: 1, c() {}};", {})
        assert result == [{'name': 'c', 'type': 'function', 'args': []}]

    def test_no_exports(self):
        assert describe('const a = 1;', {}) == []

    def test_missing_input(self):
        with pytest.raises(MissingArgumentError):
            get_export()
