#!/usr/bin/env python3
# -*- coding: utf-8 -*-
class MatrixTuiError(Exception):
    ''' Base class for all exceptions in the mtui package '''

class ConfigError(MatrixTuiError):
    ''' Exception raised when the configuration or server address is invalid '''

class LoginError(MatrixTuiError):
    ''' Exception raised when there is an error in the login process '''

class SyncError(MatrixTuiError):
    ''' Exception raised when the initial sync with the homeserver fails '''

class ProtocolError(MatrixTuiError):
    ''' Exception raised when a protocol request or event cannot be used '''
