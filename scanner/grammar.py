"""
JavaScript Grammar Definition.

This module contains the Lark grammar for the subset of JavaScript (with JSX)
that the scanner understands. It is used with the Earley parser so that
arrow/parenthesis ambiguities do not need lookahead tricks. Statements end at
`;` or at a line break that the next line does not continue, so a call on the
same line always stays part of its statement.
"""

_KEYWORDS = (
    "break|case|catch|class|const|continue|debugger|default|delete|do|else|"
    "export|extends|finally|for|function|if|import|in|instanceof|new|return|"
    "super|switch|this|throw|try|typeof|var|void|while|with|yield|let|static|"
    "async|await|true|false|null"
)

js_grammar = r"""
    start: _statement* _last?

    // Simple statements end at `;` or a line break; the last one in a list may end
    // at `}` or the end of input instead.
    _statement: _simple _EOS
              | export_declaration
              | if_stmt
              | for_stmt
              | while_stmt
              | do_stmt
              | switch_stmt
              | try_stmt
              | block
              | empty_stmt

    _simple: import_decl
           | export_default
           | export_var
           | export_named
           | export_all
           | var_decl
           | return_stmt
           | throw_stmt
           | break_stmt
           | continue_stmt
           | expr_stmt

    _last: _simple
         | if_last
         | for_last
         | while_last

    // --- Modules ---
    import_decl: _IMPORT import_clause _FROM STRING
               | _IMPORT STRING
    import_clause: default_import ("," (namespace_import | named_imports))?
                 | namespace_import
                 | named_imports
    default_import: NAME
    namespace_import: "*" _AS NAME
    named_imports: "{" (import_spec ("," import_spec)* ","?)? "}"
    import_spec: IDENT_NAME (_AS NAME)?

    export_default: _EXPORT _DEFAULT expr
    export_var: _EXPORT var_decl
    export_declaration: _EXPORT (function_expr | class_expr)
    export_named: _EXPORT "{" (export_spec ("," export_spec)* ","?)? "}" (_FROM STRING)?
    export_all: _EXPORT "*" (_AS IDENT_NAME)? _FROM STRING
    export_spec: IDENT_NAME (_AS IDENT_NAME)?

    // --- Statements ---
    var_decl: VAR_KIND declarator ("," declarator)*
    declarator: _pattern ("=" expr)?
    return_stmt: _RETURN expr?
               | _RETURN_EOL
    if_stmt: _IF "(" expr ")" _statement (_ELSE _statement)?
    if_last: _IF "(" expr ")" (_statement _ELSE)? _last
    for_stmt: _FOR "(" for_head ")" _statement
    for_last: _FOR "(" for_head ")" _last
    for_head: (VAR_KIND declarator ("," declarator)* | expr)? ";" expr? ";" expr?
            | VAR_KIND? _pattern (_OF | _IN) expr
    while_stmt: _WHILE "(" expr ")" _statement
    while_last: _WHILE "(" expr ")" _last
    do_stmt: _DO _statement _WHILE "(" expr ")"
    switch_stmt: _SWITCH "(" expr ")" "{" (switch_case | switch_default)* "}"
    switch_case: _CASE expr ":" _statement* _last?
    switch_default: _DEFAULT ":" _statement* _last?
    throw_stmt: _THROW expr
    try_stmt: _TRY block catch_clause? (_FINALLY block)?
    catch_clause: _CATCH ("(" _pattern ")")? block
    break_stmt: _BREAK NAME?
    continue_stmt: _CONTINUE NAME?
    block: "{" _statement* _last? "}"
    expr_stmt: expr
    empty_stmt: ";"

    // --- Expressions ---
    ?expr: arrow_function
         | assignment
         | conditional

    assignment: call_member ASSIGN_OP expr

    arrow_function: _ASYNC? arrow_params "=>" _arrow_body
    arrow_params: NAME
                | "(" params? ")"
    _arrow_body: block | expr

    ?conditional: binary
                | binary "?" expr ":" expr          -> conditional_expr

    ?binary: unary (BINOP unary)*

    ?unary: postfix
          | UNARY_OP unary                          -> unary_expr
          | _AWAIT unary                            -> await_expr
          | _YIELD "*"? unary?                      -> yield_expr

    ?postfix: call_member
            | call_member UPDATE_OP                 -> update_expr

    ?call_member: primary
                | call_member "." IDENT_NAME        -> member
                | call_member "?." IDENT_NAME       -> member
                | call_member "?."? "[" expr "]"    -> computed_member
                | call_member "?."? arguments       -> call
                | call_member TEMPLATE              -> tagged_template
                | _NEW call_member arguments?       -> new_expr

    arguments: "(" (_argument ("," _argument)* ","?)? ")"
    _argument: expr | spread
    spread: "..." expr

    ?primary: NAME                                  -> identifier
            | STRING                                -> string
            | NUMBER                                -> number
            | TEMPLATE                              -> template
            | REGEX                                 -> regex
            | BOOLEAN                               -> boolean
            | NULL                                  -> null
            | _THIS                                 -> this_expr
            | _SUPER                                -> super_expr
            | object
            | array
            | function_expr
            | class_expr
            | jsx
            | "(" expr ")"                          -> paren

    // --- Objects & arrays ---
    object: "{" (_obj_member ("," _obj_member)* ","?)? "}"
    _obj_member: property | shorthand_property | spread | method_property
    property: prop_key ":" expr
    shorthand_property: NAME
    method_property: _ACCESSOR? _ASYNC? "*"? prop_key "(" params? ")" block
    prop_key: IDENT_NAME
            | STRING
            | NUMBER
            | "[" expr "]"

    array: "[" (_array_elem ("," _array_elem)* ","?)? "]"
    _array_elem: expr | spread

    // --- Functions ---
    function_expr: _ASYNC? _FUNCTION "*"? NAME? "(" params? ")" block
    params: _param ("," _param)* ","?
    _param: _pattern | default_param | rest_element
    default_param: _pattern "=" expr
    rest_element: "..." _pattern

    _pattern: binding_name | object_pattern | array_pattern
    binding_name: NAME
    object_pattern: "{" (_pattern_prop ("," _pattern_prop)* ","?)? "}"
    _pattern_prop: pattern_property | shorthand_pattern | rest_element
    pattern_property: prop_key ":" _pattern ("=" expr)?
    shorthand_pattern: NAME ("=" expr)?
    array_pattern: "[" (_array_pattern_elem ("," _array_pattern_elem)* ","?)? "]"
    _array_pattern_elem: _pattern | default_param | rest_element

    // --- Classes ---
    class_expr: decorator* _CLASS NAME? (_EXTENDS call_member)? class_body
    decorator: "@" call_member
    class_body: "{" _class_member* "}"
    _class_member: class_method | class_property | ";"
    class_method: decorator* STATIC? _ACCESSOR? _ASYNC? "*"? class_key "(" params? ")" block
    class_property: decorator* STATIC? class_key ("=" expr)? ";"?
    class_key: CLASS_KEY
             | STRING
             | NUMBER
             | "[" expr "]"

    // --- JSX (kept opaque) ---
    jsx: "<" JSX_NAME _jsx_attr* "/" ">"
       | "<" JSX_NAME _jsx_attr* ">" _jsx_child* "<" "/" JSX_NAME ">"
       | "<" ">" _jsx_child* "<" "/" ">"
    _jsx_attr: JSX_NAME ("=" (STRING | "{" expr "}" | jsx))?
             | "{" "..." expr "}"
    _jsx_child: JSX_TEXT | jsx | "{" expr? "}"

    // --- Keywords ---
    _IMPORT: /import(?![\w$])/
    _EXPORT: /export(?![\w$])/
    _DEFAULT: /default(?![\w$])/
    _FROM: /from(?![\w$])/
    _AS: /as(?![\w$])/
    _RETURN: /return(?![\w$])(?![ \t]*(?:\r?\n|$))/
    _RETURN_EOL: /return(?=[ \t]*(?:\r?\n|$))/
    _IF: /if(?![\w$])/
    _ELSE: /else(?![\w$])/
    _FOR: /for(?![\w$])/
    _OF: /of(?![\w$])/
    _IN: /in(?![\w$])/
    _WHILE: /while(?![\w$])/
    _DO: /do(?![\w$])/
    _SWITCH: /switch(?![\w$])/
    _CASE: /case(?![\w$])/
    _THROW: /throw(?![\w$])/
    _TRY: /try(?![\w$])/
    _CATCH: /catch(?![\w$])/
    _FINALLY: /finally(?![\w$])/
    _BREAK: /break(?![\w$])/
    _CONTINUE: /continue(?![\w$])/
    _FUNCTION: /function(?![\w$])/
    _CLASS: /class(?![\w$])/
    _EXTENDS: /extends(?![\w$])/
    _NEW: /new(?![\w$])/
    _THIS: /this(?![\w$])/
    _SUPER: /super(?![\w$])/
    _ASYNC: /async(?![\w$])/
    _AWAIT: /await(?![\w$])/
    _YIELD: /yield(?![\w$])/
    _ACCESSOR: /(?:get|set)(?![\w$])/
    STATIC: /static(?![\w$])/
    VAR_KIND: /(?:const|let|var)(?![\w$])/

    // --- Terminals ---
    NAME: /(?!(?:__KEYWORDS__)(?![\w$]))[a-zA-Z_$][\w$]*/
    IDENT_NAME: /#?[a-zA-Z_$][\w$]*/
    // modifiers are keys only when no other key follows them (`get() {}`)
    CLASS_KEY: /(?!(?:static|get|set|async)\s+[#\[\w$"'*])#?[a-zA-Z_$][\w$]*/
    STRING: /'(?:[^'\\\n]|\\.)*'|"(?:[^"\\\n]|\\.)*"/
    TEMPLATE: /`(?:[^`\\]|\\.)*`/
    NUMBER: /0[xX][0-9a-fA-F_]+n?|0[bB][01_]+n?|0[oO][0-7_]+n?|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d+)?n?/
    REGEX: /\/(?![*\/])(?:[^\/\\\n\[]|\\.|\[(?:[^\]\\\n]|\\.)*\])+\/[dgimsuy]*/
    BOOLEAN: /(?:true|false)(?![\w$])/
    NULL: /null(?![\w$])/

    ASSIGN_OP: /=(?![=>])|\*\*=|>>>=|<<=|>>=|&&=|\|\|=|\?\?=|[-+*\/%&|^]=/
    BINOP: /===|!==|\*\*|==|!=|<=|>=|&&|\|\||\?\?|>>>|<<|>>|[-+*\/%<>&|^]|instanceof(?![\w$])|in(?![\w$])/
    UNARY_OP: /\+\+|--|[!~+\-]|typeof(?![\w$])|void(?![\w$])|delete(?![\w$])/
    UPDATE_OP: "++" | "--"

    JSX_NAME: /[a-zA-Z_$][\w$\-]*(?:[.:][\w$\-]+)*/
    JSX_TEXT: /[^<>{}]+/

    // a line break ends a statement unless the next line continues the expression
    _EOS: /[ \t]*(?:;|\r?\n(?![ \t\r\n]*(?:[(\[`+\-*.,?:=<>&|%^]|\/(?![\/*]))))/

    COMMENT: /\/\/[^\n]*|\/\*[\s\S]*?\*\//
    HASHBANG: /#![^\n]*/

    %import common.WS
    %ignore WS
    %ignore COMMENT
    %ignore HASHBANG
""".replace("__KEYWORDS__", _KEYWORDS)
