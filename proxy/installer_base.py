# TRAEFIK-STACK v1.0
from abc import ABC, abstractmethod


class BaseInstaller(ABC):
    '''
    Base class for installers
    Subclasses provide dependency checks, configuration and the install step
    '''

    def __init__(self, project_root, config):
        self.project_root = project_root
        self.config = config

    @abstractmethod
    def check_dependencies(self):
        '''Check if system has required dependencies'''

    @abstractmethod
    def get_configuration(self):
        '''Get configuration from user'''

    @abstractmethod
    def install(self, config):
        '''Install the application'''

    def verify_installation(self):
        '''Verify installation was successful (optional)'''
        return True
