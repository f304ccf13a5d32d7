"""
DSL Parser
==========

Recursive-descent parser turning the lexer's token stream into the workflow
AST. Parsing is single-shot: the first grammar violation raises ParseError
pointing at the offending token.

Grammar::

    Program    := Workflow EOF
    Workflow   := 'workflow' STRING '{' (Param | Var | Node | Module | Connect)* '}'
    Param      := 'param' IDENT TYPE_IDENT ('=' Expression)? Constraints?
    Constraints := '{' (('min'|'max'|'pattern'|'allowed') ':' Expression ','?)* '}'
    Var        := 'var' IDENT '=' Expression
    Node       := 'node' IDENT STRING '{' (IDENT ':' Expression ','?)* '}'
    Module     := 'module' IDENT '=' STRING '{' (IDENT ':' Expression ','?)* '}'
    Connect    := 'connect' IDENT ('.' PORT)? '->' IDENT ('.' PORT)?
    Expression := Literal | Identifier | Call | ObjectExpr | ArrayExpr | TemplateString
    Call       := IDENT '(' (Expression (',' Expression)*)? ')'
    ObjectExpr := '{' ((IDENT|STRING) ':' Expression ','?)* '}'
    ArrayExpr  := '[' (Expression ','?)* ']'
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from n8n_dsl.config.logging import get_logger
from n8n_dsl.core.dsl.lexer import Token, TokenType, tokenize
from n8n_dsl.core.errors import ParseError
from n8n_dsl.models.ast import (
    ArrayExpression,
    ConnectionDeclaration,
    ConnectionEndpoint,
    Expression,
    FunctionCallExpression,
    IdentifierExpression,
    LiteralExpression,
    ModuleDeclaration,
    NodeDeclaration,
    ObjectExpression,
    ParameterDeclaration,
    ParameterType,
    ParameterValidation,
    Program,
    TemplateExpression,
    VariableDeclaration,
    WorkflowDeclaration,
    expression_to_python,
)

logger = get_logger(__name__)

IGNORED_TOKENS = {TokenType.COMMENT, TokenType.NEWLINE}

POSITION_KEY = "position"

CONSTRAINT_KEYS = {"min", "max", "pattern", "allowed"}


class Parser:
    """Single-use recursive-descent parser over one token stream."""

    def __init__(self, tokens: Sequence[Token]) -> None:
        self.tokens: List[Token] = [t for t in tokens if t.type not in IGNORED_TOKENS]
        if not self.tokens or self.tokens[-1].type != TokenType.EOF:
            last = self.tokens[-1] if self.tokens else None
            self.tokens.append(
                Token(TokenType.EOF, "", last.line if last else 1, last.column if last else 1)
            )
        self.current = 0
        self.logger: Any = logger.bind(component="parser")  # structlog.BoundLoggerBase

    def parse(self) -> Program:
        """
        Parse the token stream into a Program.

        Returns:
            Program owning a single WorkflowDeclaration

        Raises:
            ParseError: On the first grammar violation
        """
        start = self._peek()
        workflow = self._parse_workflow()
        self._expect(TokenType.EOF, "end of input")
        self.logger.debug(
            "Parsed workflow",
            workflow=workflow.name,
            nodes=len(workflow.nodes),
            connections=len(workflow.connections),
        )
        return Program(workflow=workflow, line=start.line, column=start.column)

    # Declarations

    def _parse_workflow(self) -> WorkflowDeclaration:
        keyword = self._expect(TokenType.WORKFLOW, "'workflow'")
        name = self._expect(TokenType.STRING, "workflow name string").value
        self._expect(TokenType.LBRACE, "'{'")

        workflow = WorkflowDeclaration(name=name, line=keyword.line, column=keyword.column)

        while not self._check(TokenType.RBRACE):
            token = self._peek()
            if token.type == TokenType.PARAM:
                workflow.parameters.append(self._parse_parameter())
            elif token.type == TokenType.VAR:
                workflow.variables.append(self._parse_variable())
            elif token.type == TokenType.NODE:
                workflow.nodes.append(self._parse_node())
            elif token.type == TokenType.MODULE:
                workflow.nodes.append(self._parse_module())
            elif token.type == TokenType.CONNECT:
                workflow.connections.append(self._parse_connection())
            elif token.type == TokenType.EOF:
                raise self._error("Expected '}' to close workflow but reached end of input", token)
            else:
                raise self._error(f"Unexpected token '{token.value}'", token)

        self._expect(TokenType.RBRACE, "'}'")
        return workflow

    def _parse_parameter(self) -> ParameterDeclaration:
        keyword = self._expect(TokenType.PARAM, "'param'")
        name = self._expect(TokenType.IDENTIFIER, "parameter name").value
        type_token = self._expect(TokenType.IDENTIFIER, "parameter type")
        try:
            param_type = ParameterType(type_token.value.lower())
        except ValueError:
            allowed = ", ".join(t.value for t in ParameterType)
            raise self._error(
                f"Unknown parameter type '{type_token.value}' (expected one of: {allowed})",
                type_token,
            ) from None

        default_value: Optional[Expression] = None
        if self._match(TokenType.EQUALS):
            default_value = self._parse_expression()

        validation: Optional[ParameterValidation] = None
        if self._check(TokenType.LBRACE):
            validation = self._parse_constraints()

        return ParameterDeclaration(
            name=name,
            param_type=param_type,
            default_value=default_value,
            required=default_value is None,
            validation=validation,
            line=keyword.line,
            column=keyword.column,
        )

    def _parse_constraints(self) -> ParameterValidation:
        opening = self._peek()
        block = self._parse_parameter_block()
        unknown = [key for key in block if key not in CONSTRAINT_KEYS]
        if unknown:
            raise self._error(f"Unknown parameter constraint '{unknown[0]}'", opening)
        values = {key: expression_to_python(expr) for key, expr in block.items()}
        try:
            return ParameterValidation(**values)
        except ValidationError:
            raise self._error("Invalid parameter constraint value", opening) from None

    def _parse_variable(self) -> VariableDeclaration:
        keyword = self._expect(TokenType.VAR, "'var'")
        name = self._expect(TokenType.IDENTIFIER, "variable name").value
        self._expect(TokenType.EQUALS, "'='")
        value = self._parse_expression()
        return VariableDeclaration(name=name, value=value, line=keyword.line, column=keyword.column)

    def _parse_node(self) -> NodeDeclaration:
        keyword = self._expect(TokenType.NODE, "'node'")
        name = self._expect(TokenType.IDENTIFIER, "node name").value
        node_type = self._expect(TokenType.STRING, "node type string").value
        parameters = self._parse_parameter_block()
        position = self._lift_position(parameters)
        return NodeDeclaration(
            name=name,
            node_type=node_type,
            parameters=parameters,
            position=position,
            line=keyword.line,
            column=keyword.column,
        )

    def _parse_module(self) -> ModuleDeclaration:
        keyword = self._expect(TokenType.MODULE, "'module'")
        name = self._expect(TokenType.IDENTIFIER, "module name").value
        self._expect(TokenType.EQUALS, "'='")
        module_path = self._expect(TokenType.STRING, "module path string").value
        parameters = self._parse_parameter_block()
        return ModuleDeclaration(
            name=name,
            module_path=module_path,
            parameters=parameters,
            line=keyword.line,
            column=keyword.column,
        )

    def _parse_parameter_block(self) -> Dict[str, Expression]:
        self._expect(TokenType.LBRACE, "'{'")
        parameters: Dict[str, Expression] = {}
        while not self._check(TokenType.RBRACE):
            key = self._expect(TokenType.IDENTIFIER, "parameter name").value
            self._expect(TokenType.COLON, "':'")
            parameters[key] = self._parse_expression()
            self._match(TokenType.COMMA)
        self._expect(TokenType.RBRACE, "'}'")
        return parameters

    def _parse_connection(self) -> ConnectionDeclaration:
        keyword = self._expect(TokenType.CONNECT, "'connect'")
        source = self._parse_endpoint("source node name", "connection output name")
        self._expect(TokenType.ARROW, "'->'")
        target = self._parse_endpoint("target node name", "connection input name")
        return ConnectionDeclaration(
            source=source, target=target, line=keyword.line, column=keyword.column
        )

    def _parse_endpoint(self, node_what: str, port_what: str) -> ConnectionEndpoint:
        node = self._expect(TokenType.IDENTIFIER, node_what).value
        if not self._match(TokenType.DOT):
            return ConnectionEndpoint(node=node)
        token = self._peek()
        if token.type not in (TokenType.IDENTIFIER, TokenType.BOOLEAN):
            raise self._error(f"Expected {port_what}", token)
        self._advance()
        return ConnectionEndpoint(node=node, port=token.value)

    # Expressions

    def _parse_expression(self) -> Expression:
        token = self._peek()

        if self._match(TokenType.STRING):
            if "${" in token.value:
                return TemplateExpression(
                    template=token.value, line=token.line, column=token.column
                )
            return LiteralExpression(value=token.value, line=token.line, column=token.column)

        if self._match(TokenType.NUMBER):
            return LiteralExpression(
                value=self._to_number(token.value), line=token.line, column=token.column
            )

        if self._match(TokenType.BOOLEAN):
            return LiteralExpression(
                value=token.value.lower() == "true", line=token.line, column=token.column
            )

        if self._match(TokenType.IDENTIFIER):
            if self._match(TokenType.LPAREN):
                return self._parse_call(token)
            return IdentifierExpression(name=token.value, line=token.line, column=token.column)

        if self._match(TokenType.LBRACE):
            return self._parse_object(token)

        if self._match(TokenType.LBRACKET):
            return self._parse_array(token)

        if token.type == TokenType.EOF:
            raise self._error("Expected expression but reached end of input", token)
        raise self._error(f"Unexpected token '{token.value}'", token)

    def _parse_call(self, name: Token) -> FunctionCallExpression:
        arguments: List[Expression] = []
        while not self._check(TokenType.RPAREN):
            arguments.append(self._parse_expression())
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.RPAREN, "')'")
        return FunctionCallExpression(
            name=name.value, arguments=arguments, line=name.line, column=name.column
        )

    def _parse_object(self, opening: Token) -> ObjectExpression:
        properties: Dict[str, Expression] = {}
        while not self._check(TokenType.RBRACE):
            key_token = self._peek()
            if key_token.type not in (TokenType.IDENTIFIER, TokenType.STRING):
                raise self._error("Expected property name", key_token)
            self._advance()
            self._expect(TokenType.COLON, "':'")
            properties[key_token.value] = self._parse_expression()
            self._match(TokenType.COMMA)
        self._expect(TokenType.RBRACE, "'}'")
        return ObjectExpression(properties=properties, line=opening.line, column=opening.column)

    def _parse_array(self, opening: Token) -> ArrayExpression:
        elements: List[Expression] = []
        while not self._check(TokenType.RBRACKET):
            elements.append(self._parse_expression())
            self._match(TokenType.COMMA)
        self._expect(TokenType.RBRACKET, "']'")
        return ArrayExpression(elements=elements, line=opening.line, column=opening.column)

    # Helpers

    @staticmethod
    def _to_number(text: str) -> Union[int, float]:
        return float(text) if "." in text else int(text)

    @staticmethod
    def _lift_position(parameters: Dict[str, Expression]) -> Optional[Tuple[Any, Any]]:
        """Move a literal ``position: [x, y]`` out of the parameter map."""
        candidate = parameters.get(POSITION_KEY)
        if not isinstance(candidate, ArrayExpression) or len(candidate.elements) != 2:
            return None
        coordinates = []
        for element in candidate.elements:
            if not isinstance(element, LiteralExpression):
                return None
            if isinstance(element.value, bool) or not isinstance(element.value, (int, float)):
                return None
            coordinates.append(element.value)
        del parameters[POSITION_KEY]
        return coordinates[0], coordinates[1]

    def _peek(self) -> Token:
        return self.tokens[self.current]

    def _check(self, token_type: TokenType) -> bool:
        return self._peek().type == token_type

    def _advance(self) -> Token:
        token = self.tokens[self.current]
        if token.type != TokenType.EOF:
            self.current += 1
        return token

    def _match(self, token_type: TokenType) -> bool:
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _expect(self, token_type: TokenType, what: str) -> Token:
        if self._check(token_type):
            return self._advance()
        token = self._peek()
        found = "end of input" if token.type == TokenType.EOF else f"'{token.value}'"
        raise self._error(f"Expected {what} but got {found}", token)

    @staticmethod
    def _error(message: str, token: Token) -> ParseError:
        return ParseError(message, token.line, token.column)


def parse(tokens: Sequence[Token]) -> Program:
    """
    Parse a token stream into a Program.

    Args:
        tokens: Tokens from the lexer, ending with EOF

    Returns:
        Parsed Program
    """
    return Parser(tokens).parse()


def parse_source(source: str) -> Program:
    """Tokenize and parse DSL source in one step."""
    return parse(tokenize(source))
