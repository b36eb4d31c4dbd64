# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

from clang.cindex import TypeKind

from cppumockgen import config
from cppumockgen.classifier import Classifier
from cppumockgen.types import Type

VOID = Type(TypeKind.VOID, 'void')
INT = Type(TypeKind.INT, 'int')
CONST_INT = Type(TypeKind.INT, 'const int', const=True)
SHORT = Type(TypeKind.SHORT, 'short')
LONG = Type(TypeKind.LONG, 'long')
CONST_CHAR = Type(TypeKind.CHAR_S, 'const char', const=True)
CLASS = Type(TypeKind.RECORD, 'Class1')
CONST_STRUCT = Type(TypeKind.ELABORATED, 'const struct S', const=True,
                    inner=Type(TypeKind.RECORD, 'struct S'))
ENUM = Type(TypeKind.ENUM, 'Enum1')
INT_PTR = Type(TypeKind.POINTER, 'int *', inner=INT)
STRING = Type(TypeKind.POINTER, 'const char *', inner=CONST_CHAR)
INT_REF = Type(TypeKind.LVALUEREFERENCE, 'int &', inner=INT)
INT_RREF = Type(TypeKind.RVALUEREFERENCE, 'int &&', inner=INT)
FUNCTION_PTR = Type(TypeKind.POINTER, 'void (*)(int)',
                    inner=Type(TypeKind.FUNCTIONPROTO, 'void (int)'))
FUNCTION_PTR_TYPEDEF = Type(TypeKind.TYPEDEF, 'cb_t', inner=FUNCTION_PTR, canonical=FUNCTION_PTR)


def return_(type_, override=None):
    return Classifier().classify_return(type_, override)


def arg(name, type_, override=None):
    return Classifier().classify_argument(name, type_, override)


def spec(value, is_return=False):
    return config.OverrideSpec.parse(value, 'f#p=' + value, is_return)
