# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

import pytest

from cppumockgen import config
from cppumockgen import utils
from cppumockgen.types import MockedType


class TestOverrideSpec:

    @pytest.mark.parametrize('value, expected', [
        ('Int', config.OverrideSpec(kind=MockedType.INT)),
        ('UnsignedLong', config.OverrideSpec(kind=MockedType.UNSIGNED_LONG)),
        ('String~$.c_str()',
         config.OverrideSpec(kind=MockedType.STRING, expr_mod_back='.c_str()')),
        ('ConstPointer~&$',
         config.OverrideSpec(kind=MockedType.CONST_POINTER, expr_mod_front='&')),
        ('InputOfType:Struct1',
         config.OverrideSpec(kind=MockedType.INPUT_OF_TYPE,
                             exposed_type_name='Struct1',
                             expectation_arg_type_name='Struct1')),
        ('OutputOfType:std::ostream<std::string~&$',
         config.OverrideSpec(kind=MockedType.OUTPUT_OF_TYPE,
                             exposed_type_name='std::ostream',
                             expectation_arg_type_name='std::string',
                             expr_mod_front='&')),
        ('MemoryBuffer~$->data/$->size',
         config.OverrideSpec(kind=MockedType.MEMORY_BUFFER,
                             expr_mod_back='->data',
                             size_expr_back='->size',
                             has_size_expr_placeholder=True)),
        ('MemoryBuffer/16',
         config.OverrideSpec(kind=MockedType.MEMORY_BUFFER, size_expr_front='16')),
        ('Skip', config.OverrideSpec(kind=MockedType.SKIP)),
    ])
    def test_parse(self, value, expected):
        assert config.OverrideSpec.parse(value, 'f#p=' + value, False) == expected

    def test_parse_modifier_without_placeholder(self):
        spec = config.OverrideSpec.parse('Pointer~(void*)', 'f#p=Pointer~(void*)', False)
        assert spec.expr_mod_front == '(void*)'
        assert spec.expr_mod_back == ''
        assert spec.apply('p') == '(void*)p'

    @pytest.mark.parametrize('value', [
        '',
        'Foo',
        'Int~',
        'Int:Foo',
        'Int/4',
        'Int~$$',
        'InputOfType',
        'InputOfType:',
        'OutputOfType~$',
        'MemoryBuffer',
        'MemoryBuffer~$',
        'MemoryBuffer/$$',
    ])
    def test_parse_failure(self, value):
        option = 'f#p=' + value
        with pytest.raises(utils.CppUMockGenRuntimeError) as e:
            config.OverrideSpec.parse(value, option, False)
        assert str(e.value).endswith(f'<{option}>.')

    @pytest.mark.parametrize('value', [
        'Output', 'Skip', 'InputOfType:T', 'OutputOfType:T', 'MemoryBuffer/4', 'POD',
    ])
    def test_parse_return_failure(self, value):
        with pytest.raises(utils.CppUMockGenRuntimeError):
            config.OverrideSpec.parse(value, 'f@=' + value, True)

    @pytest.mark.parametrize('value', ['Int', 'String~$.c_str()', 'ConstPointer'])
    def test_parse_return(self, value):
        assert config.OverrideSpec.parse(value, 'f@=' + value, True) is not None

    @pytest.mark.parametrize('value, expr, expected', [
        ('MemoryBuffer~$->data/$->size', 'p', 'p->size'),
        ('MemoryBuffer/sizeof(*$)', 'p', 'sizeof(*p)'),
        ('MemoryBuffer/16', 'p', '16'),
    ])
    def test_apply_size(self, value, expr, expected):
        spec = config.OverrideSpec.parse(value, 'f#p=' + value, False)
        assert spec.apply_size(expr) == expected


class TestOverrideRegistry:

    def test_get(self):
        registry = config.OverrideRegistry([
            'ns::f#p=Int',
            'ns::f@=Long',
            '#const char *=Pointer',
            '@int=Double',
        ])
        assert len(registry) == 4
        assert registry.get('ns::f#p').kind == MockedType.INT
        assert registry.get('ns::f@').kind == MockedType.LONG
        assert registry.get('#const char *').kind == MockedType.POINTER
        assert registry.get('@int').kind == MockedType.DOUBLE
        assert registry.get('ns::f#q') is None
        assert registry.get('') is None

    def test_duplicate_key(self):
        with pytest.raises(utils.CppUMockGenRuntimeError) as e:
            config.OverrideRegistry(['f#p=Int', 'f#p=Long'])
        assert str(e.value) == 'Override option key <f#p> can only be passed once.'

    @pytest.mark.parametrize('option', ['=Int', '#=Int', '@=Int', 'f#p', 'f@=Output'])
    def test_invalid_option(self, option):
        with pytest.raises(utils.CppUMockGenRuntimeError) as e:
            config.OverrideRegistry([option])
        assert option in str(e.value)


class TestConfig:

    def test_defaults(self):
        config_ = config.Config()
        assert not config_.use_underlying_typedef
        assert config_.get_type_override('f#p') is None

    def test_overrides(self):
        config_ = config.Config(True, ['f#p=Skip'])
        assert config_.use_underlying_typedef
        assert config_.get_type_override('f#p').kind == MockedType.SKIP
