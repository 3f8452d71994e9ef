"""
Utility functions for PyNIH
"""

import statistics
from typing import Any, Dict, List, Optional

from .models import Project


def filter_projects_by_amount(projects: List[Project], min_amount: Optional[float] = None, max_amount: Optional[float] = None) -> List[Project]:
    """
    Filter projects by award amount range
    
    Args:
        projects: List of Project objects
        min_amount: Minimum award amount (inclusive)
        max_amount: Maximum award amount (inclusive)
        
    Returns:
        List of projects within the specified amount range
    """
    filtered = []
    for project in projects:
        if project.award_amount is None:
            continue
            
        if min_amount is not None and project.award_amount < min_amount:
            continue
            
        if max_amount is not None and project.award_amount > max_amount:
            continue
            
        filtered.append(project)
    
    return filtered


def filter_active_projects(projects: List[Project]) -> List[Project]:
    """Keep only projects flagged as active"""
    return [p for p in projects if p.is_active]


def group_projects_by_fiscal_year(projects: List[Project]) -> Dict[int, List[Project]]:
    """
    Group projects by their fiscal year
    
    Args:
        projects: List of Project objects
        
    Returns:
        Dictionary with fiscal year as key and list of projects as value
    """
    grouped: Dict[int, List[Project]] = {}
    for project in projects:
        grouped.setdefault(project.fiscal_year, []).append(project)
    return dict(sorted(grouped.items()))


def extract_unique_organizations(projects: List[Project]) -> List[str]:
    """
    Extract unique awardee organization names
    
    Returns:
        Sorted list of unique organization names
    """
    return sorted({p.organization.org_name for p in projects if p.organization.org_name})


def calculate_total_funding(projects: List[Project]) -> float:
    """Total award amount (projects without an amount are skipped)"""
    return sum(p.award_amount for p in projects if p.award_amount is not None)


def get_funding_statistics(projects: List[Project]) -> Dict[str, Any]:
    """
    Get funding statistics from a list of projects
    
    Args:
        projects: List of Project objects
        
    Returns:
        Dictionary with total, average, median, min, max and counts
    """
    amounts = [p.award_amount for p in projects if p.award_amount is not None]
    
    if not amounts:
        return {
            'total_funding': 0.0,
            'average_funding': 0.0,
            'median_funding': 0.0,
            'min_funding': 0.0,
            'max_funding': 0.0,
            'project_count': len(projects),
            'funded_project_count': 0
        }
    
    return {
        'total_funding': sum(amounts),
        'average_funding': sum(amounts) / len(amounts),
        'median_funding': statistics.median(amounts),
        'min_funding': min(amounts),
        'max_funding': max(amounts),
        'project_count': len(projects),
        'funded_project_count': len(amounts)
    }


def create_project_summary(project: Project) -> Dict[str, Any]:
    """
    Create a summary dictionary for a project
    
    Args:
        project: Project object
        
    Returns:
        Dictionary with key project information
    """
    contact = project.contact_pi
    return {
        'appl_id': project.appl_id,
        'project_num': project.project_num,
        'title': project.project_title,
        'fiscal_year': project.fiscal_year,
        'organization': project.organization.org_name,
        'contact_pi': contact.full_name if contact else None,
        'pi_count': len(project.principal_investigators),
        'award_amount': project.award_amount,
        'is_active': project.is_active,
        'start_date': project.project_start_date.date().isoformat() if project.project_start_date else None,
        'end_date': project.project_end_date.date().isoformat() if project.project_end_date else None
    }
